from __future__ import annotations

import uvicorn

from .config import settings
from .logging_config import configure_logging


def main() -> None:
    configure_logging(log_level=settings.log_level, json_logs=settings.json_logs)
    uvicorn.run(
        "backend.app.main:app",
        host=settings.http_host,
        port=settings.http_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
