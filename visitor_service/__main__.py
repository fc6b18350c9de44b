"""Run the visitor service with uvicorn: ``python -m visitor_service``."""

import uvicorn

from .config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "visitor_service.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        workers=1,  # run state lives in-process
    )


if __name__ == "__main__":
    main()
