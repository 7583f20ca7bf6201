import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lifelog.config import APP_NAME
from lifelog.context import AppContext, build_default_context
from lifelog.routes.auth_routes import router as auth_router
from lifelog.routes.data_routes import router as data_router
from lifelog.routes.journal_routes import router as journal_router
from lifelog.routes.notification_routes import cron_router, router as notification_router

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_app(context: AppContext | None = None) -> FastAPI:
    app = FastAPI(title=APP_NAME)
    app.state.context = context or build_default_context()

    @app.get("/api/v1/health-check")
    async def health():
        return {"status": "ok", "message": "Backend is alive!"}

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router)
    app.include_router(journal_router)
    app.include_router(data_router)
    app.include_router(notification_router)
    app.include_router(cron_router)
    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("lifelog.main:create_app", factory=True, host="0.0.0.0", port=8000, reload=True)
