"""Lead model for NexaCRM."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship, validates

from nexacrm.core.time import utc_now
from nexacrm.db.base_class import Base

SCORE_MIN = 0
SCORE_MAX = 100


def clamp_score(value) -> int:
    if value is None:
        return SCORE_MIN
    return max(SCORE_MIN, min(SCORE_MAX, int(value)))


class Lead(Base):
    __tablename__ = "leads"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    company = Column(String(255), nullable=True)
    position = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False, default="new")
    source = Column(String(50), nullable=False, default="manual")
    score = Column(Integer, nullable=False, default=0)
    social_profiles = Column(JSON, nullable=False, default=dict)
    tags = Column(JSON, nullable=False, default=list)
    address = Column(Text, nullable=True)
    website = Column(String(512), nullable=True)
    place_id = Column(String(255), nullable=True)
    notes_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    owner = relationship("User", back_populates="leads")
    # No delete cascade: removing a lead nulls lead_id on these rows
    notes = relationship("Note", back_populates="lead")
    tasks = relationship("Task", back_populates="lead")
    files = relationship("File", back_populates="lead")

    @validates("score")
    def _clamp_score(self, key, value):
        return clamp_score(value)
