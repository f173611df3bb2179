"""Business logic services.

Services contain all business logic and are called by routes.
They accept the database session explicitly and never commit; the route's
get_session() block decides the transaction boundary.
"""
