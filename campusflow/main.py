import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from campusflow.core import config
from campusflow.core.errors import setup_error_handlers
from campusflow.database import Base, engine, ensure_schema
from campusflow.routes import (
    auth_routes,
    feed_routes,
    notification_routes,
    profile_routes,
    record_routes,
    schedule_routes,
)

# Model modules register their tables on Base.metadata when imported.
from campusflow.services import collections  # noqa: F401
from campusflow.models import profile  # noqa: F401

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

config.validate_runtime_config()

app = FastAPI(title='CampusFlow API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

setup_error_handlers(app)


@app.on_event('startup')
def initialize_database() -> None:
    try:
        Base.metadata.create_all(bind=engine)
        ensure_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and Postgres credentials.')


@app.get('/')
def root():
    return {'status': 'CampusFlow API Running'}


app.include_router(auth_routes.router, prefix='/auth')
app.include_router(record_routes.router, prefix='/records')
app.include_router(notification_routes.router, prefix='/notifications')
app.include_router(profile_routes.router, prefix='/profiles')
app.include_router(schedule_routes.router, prefix='/schedule')
app.include_router(feed_routes.router, prefix='/feed')
