"""Social monitor models: saved keyword watches and their collected posts."""

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from nexacrm.core.time import utc_now
from nexacrm.db.base_class import Base


class SocialMonitor(Base):
    __tablename__ = "social_monitors"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    keyword = Column(String(255), nullable=False)
    platforms = Column(JSON, nullable=False, default=list)
    active = Column(Boolean, nullable=False, default=True)
    result_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    owner = relationship("User", back_populates="monitors")
    results = relationship("SocialResult", back_populates="monitor", cascade="all, delete-orphan")


class SocialResult(Base):
    __tablename__ = "social_results"

    id = Column(Integer, primary_key=True, index=True)
    monitor_id = Column(Integer, ForeignKey("social_monitors.id", ondelete="CASCADE"), nullable=False, index=True)
    platform = Column(String(50), nullable=False)
    author = Column(JSON, nullable=False, default=dict)
    content = Column(Text, nullable=False)
    url = Column(String(1024), nullable=True)
    engagement = Column(JSON, nullable=False, default=dict)
    sentiment = Column(String(20), nullable=False, default="neutral")
    found_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    monitor = relationship("SocialMonitor", back_populates="results")
