from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from civicsense.config import SQLALCHEMY_DATABASE_URL

# Only the signed-in session is persisted; reports live in memory.
engine = create_engine(SQLALCHEMY_DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

class Base(DeclarativeBase):
    pass
