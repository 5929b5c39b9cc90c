"""Entrypoint: python -m realtime_chat"""
from __future__ import annotations

import logging

import uvicorn

from realtime_chat.api.middleware.correlation_id import CorrelationIdFilter
from realtime_chat.config import settings


def configure_logging() -> None:
    handler = logging.StreamHandler()
    handler.addFilter(CorrelationIdFilter())
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s [%(correlation_id)s]: %(message)s",
        handlers=[handler],
    )


def main() -> None:
    configure_logging()
    uvicorn.run(
        "realtime_chat.app:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
        ws_ping_interval=settings.WS_PING_INTERVAL_SECONDS,
        ws_ping_timeout=settings.WS_PING_TIMEOUT_SECONDS,
    )


if __name__ == "__main__":
    main()
