"""Application factory and entry point.

Run with:
    uvicorn app:app --reload
"""

from __future__ import annotations

from fastapi import FastAPI

from api import accumulate_router, domains_router, set_settings
from logging_config import setup_logging
from settings import Settings


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build and return the FastAPI application.

    Accepts optional settings for testing; reads the environment if omitted.
    """
    if settings is None:
        settings = Settings.from_env()

    set_settings(settings)
    setup_logging(level=settings.log_level, json_format=settings.log_json)

    app = FastAPI(
        title="Bounded Accumulation API",
        description=(
            "Checked repeated addition and subtraction over fixed-width "
            "numeric domains. Each accumulation either completes or is "
            "refused before the step that would leave the domain's range."
        ),
        version="0.1.0",
    )
    app.include_router(domains_router)
    app.include_router(accumulate_router)
    return app


# Default app instance for `uvicorn app:app`
app = create_app()
