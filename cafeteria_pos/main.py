from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import sessionmaker

from .api import register_routers
from .api.errors import register_error_handlers
from .core.config import get_settings
from .core.logging import configure_logging
from .database import Base, SessionLocal
from .realtime import BroadcastHub, OutboxDispatcher

settings = get_settings()
configure_logging(settings.LOG_LEVEL)


def create_app(session_factory: sessionmaker = SessionLocal) -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="Order placement with recipe-based stock deduction and live kitchen updates.",
        version=settings.VERSION,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    hub = BroadcastHub()
    app.state.session_factory = session_factory
    app.state.hub = hub
    app.state.dispatcher = OutboxDispatcher(session_factory, hub, batch_size=settings.OUTBOX_BATCH_SIZE)

    register_routers(app)
    register_error_handlers(app)

    @app.on_event("startup")
    async def startup_event() -> None:
        Base.metadata.create_all(bind=session_factory.kw["bind"])
        # Publish anything committed before a previous shutdown.
        await app.state.dispatcher.flush()

    @app.get("/", tags=["Health"])
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
