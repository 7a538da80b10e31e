"""
Application package initializer.

Each domain (users, interviews, AI answers, CV upload, payments) exposes
a router in ``api/v1/endpoints`` backed by a service in ``services``.
"""

from .main import app  # noqa: F401
