# nosabos/models/database.py - Local notebook tables

from sqlalchemy import Column, String, Integer, Boolean, DateTime, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.ext.asyncio import create_async_engine
from datetime import datetime
import logging
import os

logger = logging.getLogger(__name__)

Base = declarative_base()


class Note(Base):
    __tablename__ = "notes"

    id = Column(String, primary_key=True)
    npub = Column(String, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # What the note is about
    lesson_title = Column(String, default="")
    cefr_level = Column(String, default="A1")
    module_type = Column(String, default="vocabulary")  # flashcard, vocabulary, grammar
    target_lang = Column(String, default="es")
    support_lang = Column(String, default="en")

    # Generated content
    example = Column(Text, default="")
    summary = Column(Text, default="")
    was_correct = Column(Boolean, default=False)

    # Ordering inside one user's notebook
    position = Column(Integer, default=0)

    def to_dict(self):
        return {
            "id": self.id,
            "npub": self.npub,
            "lessonTitle": self.lesson_title,
            "cefrLevel": self.cefr_level,
            "example": self.example,
            "summary": self.summary,
            "targetLang": self.target_lang,
            "supportLang": self.support_lang,
            "moduleType": self.module_type,
            "wasCorrect": self.was_correct,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


def _ensure_sqlite_dir(database_url: str):
    if database_url.startswith("sqlite") and ":///" in database_url:
        db_path = database_url.split(":///", 1)[1]
        directory = os.path.dirname(db_path)
        if directory and db_path != ":memory:":
            os.makedirs(directory, exist_ok=True)


async def init_db(database_url: str):
    """Create the notes tables and return the async engine"""
    try:
        logger.info("Initializing notes database...")
        _ensure_sqlite_dir(database_url)
        engine = create_async_engine(database_url, echo=False)

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables created successfully")

        return engine

    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise
