# storefront/main.py
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine

from storefront.api.routers import carts, health, orders, products, users
from storefront.data import database
from storefront.data.migrations import run_migrations
from storefront.services.conversion_service import ConversionService
from storefront.services.experiment_service import ExperimentService
from storefront.services.lock_service import BaseLockService, build_lock_service
from storefront.utils.logging import get_logger
from storefront.utils.settings import PORT, cors_origins

logger = get_logger(__name__)


def create_app(
    engine: Engine | None = None,
    experiments: ExperimentService | None = None,
    lock_service: BaseLockService | None = None,
    conversions: ConversionService | None = None,
) -> FastAPI:
    """
    Skladanie aplikacji. Zaleznosci (engine, klient eksperymentow, locki,
    dispatch konwersji) mozna podac z zewnatrz, domyslnie budowane z settings.
    """
    engine = engine or database.engine

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Migracje schematu ({engine.url.render_as_string(hide_password=True)})")
        app.state.migration_report = run_migrations(engine)

        owns_experiments = app.state.experiments is None
        if owns_experiments:
            app.state.experiments = ExperimentService.from_settings()

        yield

        # flush kolejki eventow Optimizely przy wylaczaniu
        if owns_experiments:
            app.state.experiments.close()
            app.state.experiments = None

    app = FastAPI(
        title="Store API",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.migration_report = None
    app.state.experiments = experiments
    app.state.lock_service = lock_service or build_lock_service()
    app.state.conversions = conversions or ConversionService()

    if engine is not database.engine:
        session_factory = database.build_session_factory(engine)

        def _get_db():
            db = session_factory()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[database.get_db] = _get_db

    origins = cors_origins()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # credentials tylko przy jawnej liscie domen
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(health.router)
    app.include_router(products.router)
    app.include_router(users.router)
    app.include_router(carts.router)
    app.include_router(orders.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=PORT)
