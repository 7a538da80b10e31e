"""Entry point for the AiPilot API server.

Intended to be executed from the project root, for example under
Docker, where only a single Python file is specified:

    python run.py

Host and port are read from the ``HOST`` and ``PORT`` environment
variables (defaults ``0.0.0.0`` and ``3000``).  Everything else is
configured through ``.env``; see ``aipilot_api/app/core/config.py``.
"""
import asyncio
import os

from uvicorn import Config, Server

from aipilot_api.app.main import app


async def main() -> None:
    """Serve the API with Uvicorn until interrupted."""
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "3000"))
    config = Config(app=app, host=host, port=port, reload=False, log_level="info")
    server = Server(config)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
