"""
horizons_api.api.__main__

Entrypoint for running the FastAPI application via `python -m horizons_api.api`.
"""

from __future__ import annotations

import uvicorn

from horizons_api.api.app import create_app
from horizons_api.settings import get_settings


def main() -> None:
    # Settings validation errors (e.g. missing signing secret) abort here.
    settings = get_settings()
    app = create_app(settings=settings)

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,  # structlog
    )


if __name__ == "__main__":
    main()
