"""Entry point for serving the agency API.

Host and port come from the ``HOST`` and ``PORT`` environment variables
(defaults ``0.0.0.0`` and ``8000``).

Usage:
    python run.py
"""
import asyncio

from uvicorn import Config, Server

from agency_api.app.core.config import settings
from agency_api.app.main import app


async def main() -> None:
    config = Config(app=app, host=settings.host, port=settings.port, reload=False, log_level=settings.log_level.lower())
    server = Server(config)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
