from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from subgate.core.config import settings
import logging

logger = logging.getLogger(__name__)

connect_args = {}
if settings.database_url.startswith("sqlite"):
    # SQLite connections are shared across the threadpool FastAPI runs sync code in
    connect_args["check_same_thread"] = False

engine = create_engine(settings.database_url, connect_args=connect_args, pool_pre_ping=True)
SessionLocal = sessionmaker(autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dependency that yields a database session and closes it after the request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
