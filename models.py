"""Database models and shared enumerations."""
from sqlalchemy import (
    Column, Integer, String, Text, DateTime, Enum, Float,
    ForeignKey, Index
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from database import Base
import enum


class NovelStatus(str, enum.Enum):
    """Work publication status."""
    ONGOING = "ongoing"
    COMPLETED = "completed"


class GateState(str, enum.Enum):
    """Access state of a fetched page."""
    NORMAL = "normal"
    LOGIN_REQUIRED = "login-required"
    AGE_VERIFICATION_REQUIRED = "age-verification-required"
    PASSWORD_PROTECTED = "password-protected"


class StoredValue(Base):
    """Key/value row backing the SQL storage collaborator."""
    __tablename__ = 'plugin_storage'
    
    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    
    def __repr__(self):
        return f"<StoredValue(key='{self.key}')>"


class Work(Base):
    """A work downloaded for offline reading."""
    __tablename__ = 'works'
    
    id = Column(Integer, primary_key=True, index=True)
    path = Column(String(500), nullable=False, unique=True, index=True)
    title = Column(String(500), nullable=False, index=True)
    author = Column(String(255), nullable=True)
    cover = Column(String(1000), nullable=True)
    status = Column(Enum(NovelStatus), default=NovelStatus.ONGOING, nullable=False)
    rating = Column(Float, nullable=True)
    summary = Column(Text, nullable=True)
    genres = Column(Text, nullable=True)
    word_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    
    # Relationships
    chapters = relationship(
        "WorkChapter",
        back_populates="work",
        cascade="all, delete-orphan",
        order_by="WorkChapter.chapter_number",
    )
    
    def __repr__(self):
        return f"<Work(id={self.id}, title='{self.title}', path='{self.path}')>"


class WorkChapter(Base):
    """Chapter of a downloaded work."""
    __tablename__ = 'work_chapters'
    
    id = Column(Integer, primary_key=True, index=True)
    work_id = Column(Integer, ForeignKey('works.id', ondelete='CASCADE'), nullable=False, index=True)
    chapter_number = Column(Integer, nullable=False)
    title = Column(String(500), nullable=False)
    path = Column(String(500), nullable=False)
    release_time = Column(String(50), nullable=True)
    content = Column(Text, nullable=False)
    word_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    
    # Relationships
    work = relationship("Work", back_populates="chapters")
    
    __table_args__ = (
        Index('ix_work_chapters_work_chapter', 'work_id', 'chapter_number', unique=True),
    )
    
    def __repr__(self):
        return f"<WorkChapter(id={self.id}, work_id={self.work_id}, number={self.chapter_number})>"
