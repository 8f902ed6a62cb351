"""Entry point for serving the Sparplan API.

Host and port are read from the environment variables ``HOST`` and
``PORT`` (defaults ``0.0.0.0`` and ``8080``).  All other configuration
(``SECRET_KEY``, ``DATABASE_URL``, ``CORS_ORIGINS`` ...) is read by
``sparplan_api.app.core.config.Settings``.

Usage:
    python run.py
"""
import asyncio
import logging
import os

from uvicorn import Config, Server

from sparplan_api.app.main import app


async def main() -> None:
    """Serve the API with uvicorn until interrupted."""
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8080"))
    config = Config(app=app, host=host, port=port, reload=False, log_level="info")
    server = Server(config)
    logging.getLogger(__name__).info("Starting Sparplan API on %s:%s", host, port)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
