"""Run the service: ``python -m mono``."""

import logging
import sys

import uvicorn

from mono.core.settings import get_settings
from mono.domain.errors import ConfigError


def main() -> int:
    try:
        settings = get_settings()
    except ConfigError as exc:
        logging.basicConfig(level=logging.ERROR)
        logging.getLogger("mono").critical("invalid configuration: %s", exc)
        return 1

    from mono.apps.web.app import app

    # Logging is configured by the app factory; keep uvicorn from replacing it.
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None, proxy_headers=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
