"""
Run the API server:

  python -m app

Listens on PORT (default 5000).
"""

import uvicorn

from app.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
        reload=settings.APP_ENV == "dev",
    )


if __name__ == "__main__":
    main()
