import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fee_ledger.api.v1.fees.router import router as fees_router
from fee_ledger.api.v1.teacher_payments.router import router as teacher_payments_router
from fee_ledger.core.config import settings
from fee_ledger.db.session import Database


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(database: Optional[Database] = None) -> FastAPI:
    """Build the app. A caller-supplied Database is used as is and left open on shutdown."""
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = database is None
        if owned:
            app.state.database = Database(
                settings.database_url,
                echo=settings.db_echo,
                pool_recycle=settings.db_pool_recycle,
            )
        try:
            yield
        finally:
            if owned:
                await app.state.database.dispose()

    app = FastAPI(title="Fee Ledger", lifespan=lifespan)
    if database is not None:
        app.state.database = database

    # CORS: allow frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(fees_router)
    app.include_router(teacher_payments_router)

    return app


app = create_app()
