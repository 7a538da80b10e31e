"""
Version 1 of the AiPilot API, mounted under ``/api/v1``.
"""
