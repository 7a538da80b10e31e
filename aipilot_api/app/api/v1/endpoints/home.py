"""
Static welcome page served at the site root.
"""

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from aipilot_api.app.core.config import settings

router = APIRouter()

WELCOME_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>{title}</title>
  <style>
    body {{ font-family: sans-serif; margin: 4rem auto; max-width: 40rem; color: #222; }}
    code {{ background: #f3f3f3; padding: 0 .25rem; }}
  </style>
</head>
<body>
  <h1>{title}</h1>
  <p>Your AI assistant for job interviews.</p>
  <p>The REST API lives under <code>/api/v1</code>. See the <a href="/api-docs">API documentation</a>.</p>
  <p><small>Version {version}</small></p>
</body>
</html>
"""


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def home() -> str:
    return WELCOME_PAGE.format(title=settings.project_name, version=settings.api_version)
