"""
Process entry point for the capture worker.

Responsibilities:
- Load .env and configuration
- Serve the FastAPI app with uvicorn
"""

from __future__ import annotations

import os

import uvicorn
from dotenv import load_dotenv

from config import AppConfig
from server.app import create_app


def main() -> None:
    load_dotenv()
    config = AppConfig.load_from_env()
    app = create_app(config)

    uvicorn.run(
        app,
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "2222")),
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
