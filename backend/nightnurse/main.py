# Tahoe Night Nurse intake backend entrypoint: FastAPI app factory.

from fastapi import FastAPI

from backend.nightnurse.api import admin
from backend.nightnurse.api import intake
from backend.nightnurse.core.errors import register_exception_handlers
from backend.nightnurse.core.logging import setup_logging
from backend.nightnurse.core.settings import Settings, get_settings
from backend.nightnurse.db.store import RecordStore
from backend.nightnurse.services.notifications import Notifier
from backend.nightnurse.services.rate_limit import SubmissionRateLimiter


def create_app(
    settings: Settings | None = None,
    *,
    store: RecordStore | None = None,
    notifier: Notifier | None = None,
    rate_limiter: SubmissionRateLimiter | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_file)

    app = FastAPI(title=settings.app_name, version=settings.api_version)
    app.state.settings = settings
    app.state.store = store or RecordStore(settings.database_url)
    app.state.notifier = notifier or Notifier(settings)
    app.state.rate_limiter = rate_limiter or SubmissionRateLimiter(settings)

    register_exception_handlers(app)
    app.include_router(intake.router)
    app.include_router(admin.router)

    @app.get("/")
    def read_root():
        return {"app": "Tahoe Night Nurse backend", "status": "ok"}

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    @app.on_event("startup")
    def open_store():
        app.state.store.open()

    @app.on_event("shutdown")
    def close_store():
        app.state.store.close()

    return app


app = create_app()


if __name__ == "__main__":
    import os

    import uvicorn

    port = int(os.getenv("PORT", "8000"))
    uvicorn.run(app, host="0.0.0.0", port=port)
