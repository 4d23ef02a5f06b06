from fastapi import FastAPI

from franceconnect.api.routes_health import router as health_router
from franceconnect.api.routes_oauth import router as oauth_router
from franceconnect.core.config import settings
from franceconnect.core.errors import register_error_handlers
from franceconnect.core.logger import init_logging


def create_app() -> FastAPI:
    init_logging()

    # Disable interactive docs in production
    is_production = settings.ENV.lower() in ("prod", "production")
    app = FastAPI(
        title=settings.APP_NAME,
        debug=False,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
        openapi_url=None if is_production else "/openapi.json",
    )
    register_error_handlers(app)
    app.include_router(oauth_router)
    app.include_router(health_router)
    return app


app = create_app()
