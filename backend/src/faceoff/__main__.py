"""Run the API server: ``python -m faceoff``."""

import uvicorn

from faceoff.config import settings


def main():
    uvicorn.run(
        "faceoff.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
