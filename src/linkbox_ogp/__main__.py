"""Entry point: ``python -m linkbox_ogp``."""

import uvicorn

from linkbox_ogp.config import settings
from linkbox_ogp.utils.logging import configure_logging


def main() -> None:
    """Configure logging and serve the ASGI app with uvicorn."""
    configure_logging(settings.log_level, json_output=settings.log_json)

    uvicorn.run(
        "linkbox_ogp.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        access_log=settings.debug,
    )


if __name__ == "__main__":
    main()
