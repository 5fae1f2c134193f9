"""Generate database session"""

from typing import Generator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from corrchess.core.config import Settings
from corrchess.db.schema import Base


def create_db_engine(settings: Settings, echo: bool = False) -> Engine:
    return create_engine(settings.database_url, echo=echo)


def init_db(engine: Engine) -> sessionmaker[Session]:
    """Ensure all tables are created and hand back a session factory bound to the engine."""
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine)


def get_db(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
