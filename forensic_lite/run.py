#!/usr/bin/env python3
"""
Dev server for the Forensic Analysis Service
============================================

Usage:
    python -m forensic_lite.run
    HOST=127.0.0.1 PORT=9000 python -m forensic_lite.run
"""

import logging

import uvicorn

from forensic_lite.config import get_settings

logger = logging.getLogger(__name__)


def main():
    settings = get_settings()
    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
    logger.info(f"Forensic Analysis Service {settings.service_version} on http://{settings.host}:{settings.port}")
    logger.info(f"API docs: http://{settings.host}:{settings.port}/docs")

    uvicorn.run(
        "forensic_lite.api:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
