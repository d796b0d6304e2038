import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from booking.core import config
from booking.database import SessionLocal, ensure_schema
from booking.repository import SqlAlchemyBookingRepository
from booking.routes import (
    appointment_routes,
    availability_routes,
    service_routes,
    settings_routes,
    user_routes,
)
from booking.seed import seed_sample_data

logging.basicConfig(level=config.LOG_LEVEL)

config.validate_runtime_config()

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    try:
        ensure_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')
        return

    if not config.SEED_SAMPLE_DATA:
        return

    db = SessionLocal()
    try:
        seed_sample_data(SqlAlchemyBookingRepository(db))
    except SQLAlchemyError:
        db.rollback()
        logger.exception('Seeding sample data failed.')
    finally:
        db.close()


@app.get('/')
def root():
    return {'status': 'Booking API Running'}


app.include_router(user_routes.router, prefix='/api')
app.include_router(service_routes.router, prefix='/api')
app.include_router(availability_routes.router, prefix='/api')
app.include_router(settings_routes.router, prefix='/api')
app.include_router(appointment_routes.router, prefix='/api')
