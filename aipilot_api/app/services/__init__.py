"""
Service layer.

Each service encapsulates the business logic of one domain and talks
to SQLite through ``core.db`` or to an external API.  Services raise
the exceptions from ``services.exceptions``; endpoints translate them
into HTTP errors.
"""
