"""Run the API server.

Run with: python -m vidsum
"""

import uvicorn

from vidsum.config import settings


def main() -> None:
    """Serve the FastAPI app with uvicorn."""
    uvicorn.run(
        "vidsum.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
