from decimal import Decimal

from storefront.services.carts import CartLine, merge_cart_lines


def line(product_id: int, quantity: int, price: str, variant_id: int | None = None) -> CartLine:
    return CartLine(product_id=product_id, variant_id=variant_id, quantity=quantity, price=Decimal(price))


def test_disjoint_lines_are_unioned_user_first():
    merged = merge_cart_lines(
        guest_lines=[line(2, 1, "3000")],
        user_lines=[line(1, 2, "5000")],
    )
    assert [(m.product_id, m.quantity) for m in merged] == [(1, 2), (2, 1)]


def test_same_line_sums_quantity_and_keeps_user_price():
    merged = merge_cart_lines(
        guest_lines=[line(1, 3, "4500")],
        user_lines=[line(1, 2, "5000")],
    )
    assert merged == [line(1, 5, "5000")]


def test_variants_are_distinct_lines():
    merged = merge_cart_lines(
        guest_lines=[line(1, 1, "5000", variant_id=7)],
        user_lines=[line(1, 1, "5000"), line(1, 1, "5200", variant_id=8)],
    )
    assert sorted((m.variant_id or 0, m.quantity) for m in merged) == [(0, 1), (7, 1), (8, 1)]


def test_duplicate_guest_lines_collapse():
    merged = merge_cart_lines(guest_lines=[line(1, 1, "10"), line(1, 4, "10")], user_lines=[])
    assert merged == [line(1, 5, "10")]


def test_empty_inputs():
    assert merge_cart_lines([], []) == []
