"""
Pydantic & SQLAlchemy models for the sentence trainer.
Implements simplified SM-2 spaced repetition fields.
"""

from datetime import datetime, timezone
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from sqlalchemy import Column, Integer, String, Float, DateTime, Text, create_engine, ForeignKey
from sqlalchemy.types import TypeDecorator
from sqlalchemy.orm import declarative_base, sessionmaker, relationship

Base = declarative_base()

MIN_EASE = 1.3
INITIAL_EASE = 2.5
INITIAL_INTERVAL = 1


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """Timestamp stored as naive UTC, read back as aware UTC."""
    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError(f"naive datetime not allowed: {value!r}")
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return value.replace(tzinfo=timezone.utc)


# SQLAlchemy ORM Model
class SentenceDB(Base):
    __tablename__ = "sentences"
    # AUTOINCREMENT keeps ids of deleted rows from being handed out again
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    source_text = Column(Text, nullable=False)
    target_text = Column(Text, nullable=False)
    target_language = Column(String(16), nullable=False, index=True)

    # SM-2 Spaced Repetition fields
    ease = Column(Float, default=INITIAL_EASE)
    interval_days = Column(Integer, default=INITIAL_INTERVAL)
    repetitions = Column(Integer, default=0)   # Completed reviews
    next_review_at = Column(UTCDateTime(), default=utcnow, index=True)

    created_at = Column(UTCDateTime(), default=utcnow)

    history = relationship("ReviewHistory", back_populates="sentence", cascade="all, delete-orphan")


class ReviewHistory(Base):
    __tablename__ = "review_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sentence_id = Column(Integer, ForeignKey("sentences.id"), nullable=False)
    quality = Column(Integer, nullable=False)  # 0-3
    reviewed_at = Column(UTCDateTime(), default=utcnow)

    sentence = relationship("SentenceDB", back_populates="history")


# Pydantic value objects
class ReviewableItem(BaseModel):
    """A sentence pair under spaced repetition."""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    source_text: str
    target_text: str
    target_language: str
    next_review_at: datetime
    interval_days: int = Field(INITIAL_INTERVAL, ge=1)
    ease: float = Field(INITIAL_EASE, ge=MIN_EASE)
    repetitions: int = Field(0, ge=0)


class ReviewLog(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    item_id: int = Field(validation_alias=AliasChoices("item_id", "sentence_id"))
    quality: int = Field(..., ge=0, le=3, description="0=again, 3=perfect")
    reviewed_at: datetime


class CollectionStats(BaseModel):
    total: int = 0
    due: int = 0
    new: int = 0
    learning: int = 0
    mature: int = 0


class LegacySentence(BaseModel):
    """Record shape of the sentences.json file written by the 1.x releases."""
    id: int
    original: str
    translated: str
    language: str
    nextReview: datetime
    interval: int = INITIAL_INTERVAL
    ease: float = INITIAL_EASE
    repetitions: int = 0


# Database setup
def get_engine(db_path: str = "sentences.db"):
    return create_engine(f"sqlite:///{db_path}", echo=False)


def init_db(engine):
    Base.metadata.create_all(engine)


def get_session(engine):
    Session = sessionmaker(bind=engine)
    return Session()
