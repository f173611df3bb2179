"""Data stores for persistence and sessions.

Stores handle:
- PostgreSQL: DB engine, unit-of-work sessions, schema bootstrap
- Redis: server-side session payloads with TTL

No business logic in stores - that belongs in services.
"""
