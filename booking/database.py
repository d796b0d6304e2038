from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from booking.core import config


def _engine_options(database_url: str) -> dict:
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {}


engine = create_engine(config.DATABASE_URL, **_engine_options(config.DATABASE_URL))

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_schema_checked = False

INDEX_STATEMENTS = {
    "appointments": [
        "CREATE INDEX IF NOT EXISTS idx_appointments_user_date ON appointments(user_id, date)",
        "CREATE INDEX IF NOT EXISTS idx_appointments_service ON appointments(service_id)",
    ],
    "services": [
        "CREATE INDEX IF NOT EXISTS idx_services_user ON services(user_id)",
    ],
}


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_schema(bind=None) -> None:
    global _schema_checked

    if _schema_checked and bind is None:
        return

    with _schema_lock:
        if _schema_checked and bind is None:
            return

        target = bind if bind is not None else engine

        # Register every mapped table on Base.metadata before creating them.
        from booking.models import appointment, availability, service, settings, user  # noqa: F401

        Base.metadata.create_all(bind=target)

        existing_tables = set(inspect(target).get_table_names())
        with target.begin() as connection:
            for table_name, statements in INDEX_STATEMENTS.items():
                if table_name not in existing_tables:
                    continue
                for statement in statements:
                    connection.execute(text(statement))

        if bind is None:
            _schema_checked = True
