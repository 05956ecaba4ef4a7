"""
Run the API with uvicorn: `python -m transval` or the `transval` console script.

Host and port come from Settings (HOST, PORT), so the same environment that
configures the app also decides where it listens.
"""

import uvicorn

from transval.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "transval.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
