"""Application entry point for the affiliate portal."""

from __future__ import annotations

import uvicorn

from affiliate_portal.core.config_core import get_settings


def main() -> None:
    """Run the FastAPI server."""

    settings = get_settings()
    uvicorn.run(
        "affiliate_portal:create_app",
        factory=True,
        host=settings.APP_HOST,
        port=settings.APP_PORT,
        reload=settings.APP_RELOAD,
        log_config=None,
    )


if __name__ == "__main__":
    main()
