"""
Top-level package for the AiPilot API.

All functionality lives in submodules under ``app``; import the ASGI
application as ``aipilot_api.app.main:app``.
"""

__all__ = []
