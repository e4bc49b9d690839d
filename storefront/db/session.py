from sqlalchemy import create_engine, event
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool
from storefront.core.config import settings
import logging

logger = logging.getLogger("database")


def build_engine(database_url: str):
    if database_url.startswith("sqlite"):
        # Development and tests; in-memory databases share one connection
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )

    return create_engine(
        database_url,
        poolclass=QueuePool,
        pool_size=20,                    # Base connections
        max_overflow=50,                 # Additional connections under load
        pool_pre_ping=True,              # Validate connections
        pool_recycle=3600,               # Recycle every hour
        echo=False,
        connect_args={
            "options": "-c timezone=utc",
            "application_name": "storefront"
        }
    )


def enable_sqlite_savepoints(engine):
    # pysqlite defers BEGIN on its own, which breaks SAVEPOINT; let SQLAlchemy emit it
    @event.listens_for(engine, "connect")
    def disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


engine = build_engine(settings.DATABASE_URL)
if engine.dialect.name == "sqlite":
    enable_sqlite_savepoints(engine)

@event.listens_for(engine, "connect")
def receive_connect(dbapi_connection, connection_record):
    logger.info("DB connection established")

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for all models
Base = declarative_base()
