from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from campusflow.core import config


def _connect_args(url: str) -> dict:
    # Requests run on a thread pool; SQLite connections must be shareable.
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(config.DATABASE_URL, connect_args=_connect_args(config.DATABASE_URL))

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_checked_tables: set[str] = set()

# Columns added after the first deployment, keyed by table.
COLUMN_MIGRATIONS = {
    'profiles': [
        ('sso_provider', 'ALTER TABLE profiles ADD COLUMN sso_provider VARCHAR'),
        ('sso_subject', 'ALTER TABLE profiles ADD COLUMN sso_subject VARCHAR'),
    ],
    'notifications': [
        ('metadata', 'ALTER TABLE notifications ADD COLUMN metadata JSON'),
    ],
}

INDEX_STATEMENTS = {
    'schedules': [
        'CREATE INDEX IF NOT EXISTS idx_schedules_user_day ON schedules(user_id, day_of_week)',
    ],
    'notifications': [
        'CREATE INDEX IF NOT EXISTS idx_notifications_user_read ON notifications(user_id, read)',
    ],
    'timetable': [
        'CREATE INDEX IF NOT EXISTS idx_timetable_class_day ON timetable(class, day_of_week)',
    ],
}


def ensure_table_schema(table_name: str, bind=None) -> None:
    bind = bind if bind is not None else engine

    if table_name in _checked_tables:
        return

    with _schema_lock:
        if table_name in _checked_tables:
            return

        inspector = inspect(bind)

        if table_name not in inspector.get_table_names():
            _checked_tables.add(table_name)
            return

        existing_columns = {column['name'] for column in inspector.get_columns(table_name)}

        with bind.begin() as connection:
            for column_name, statement in COLUMN_MIGRATIONS.get(table_name, []):
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            for statement in INDEX_STATEMENTS.get(table_name, []):
                connection.execute(text(statement))

        _checked_tables.add(table_name)


def ensure_schema(bind=None) -> None:
    for table_name in sorted(set(COLUMN_MIGRATIONS) | set(INDEX_STATEMENTS)):
        ensure_table_schema(table_name, bind=bind)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
