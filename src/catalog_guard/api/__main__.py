"""
catalog_guard.api.__main__

Entrypoint for running the back office via `python -m catalog_guard.api`.

Responsibilities:
- Load settings (fail fast on a bad policy file before binding the port).
- Serve the app with uvicorn, leaving log output to structlog.
"""

from __future__ import annotations

import uvicorn

from catalog_guard.api.app import create_app
from catalog_guard.settings import get_settings


def main() -> None:
    settings = get_settings()
    app = create_app(settings=settings)

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,
        log_level=settings.log_level.lower(),
        # RequestContextMiddleware already logs one `http.request` line per request.
        access_log=False,
        proxy_headers=settings.env == "prod",
    )


if __name__ == "__main__":
    main()
