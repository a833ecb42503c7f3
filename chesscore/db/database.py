"""Generate database session"""

from functools import cache
from typing import Generator, Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from chesscore.core.config import load_settings
from chesscore.db.schema import Base


@cache
def get_engine(database_url: Optional[str] = None) -> Engine:
    """One engine per database URL (taken from the settings when not given). Tables are created on first use."""
    url = database_url or load_settings().database_url
    engine = create_engine(url)
    Base.metadata.create_all(bind=engine)
    return engine


def get_db(database_url: Optional[str] = None) -> Generator[Session, None, None]:
    session_local = sessionmaker(bind=get_engine(database_url))
    db = session_local()
    try:
        yield db
    finally:
        db.close()
