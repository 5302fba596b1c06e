import logging

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from backend.auth.dependencies import require_api_token
from backend.core.config import Settings, load_settings, validate_runtime_config
from backend.database import build_engine, build_session_factory, ensure_schema
from backend.routes import availability_routes, booking_routes
from backend.scheduling.resolver import SchedulingService

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    validate_runtime_config(settings)

    engine = build_engine(settings)
    session_factory = build_session_factory(engine)

    app = FastAPI()
    app.state.settings = settings
    app.state.engine = engine
    app.state.scheduling_service = SchedulingService(session_factory, settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )

    @app.on_event('startup')
    def initialize_database() -> None:
        try:
            ensure_schema(engine)
        except SQLAlchemyError:
            logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')

    @app.get('/')
    def root():
        return {'status': 'Scheduling API Running'}

    api_dependencies = [Depends(require_api_token)]
    app.include_router(availability_routes.router, prefix='/api', dependencies=api_dependencies)
    app.include_router(booking_routes.router, prefix='/api', dependencies=api_dependencies)

    return app
