"""Uploaded file metadata; the blob itself lives in the upload directory."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from nexacrm.core.time import utc_now
from nexacrm.db.base_class import Base


class File(Base):
    __tablename__ = "files"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    lead_id = Column(Integer, ForeignKey("leads.id", ondelete="SET NULL"), nullable=True, index=True)
    original_name = Column(String(512), nullable=False)
    stored_name = Column(String(255), nullable=False, unique=True)
    mime_type = Column(String(255), nullable=True)
    size = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    owner = relationship("User", back_populates="files")
    lead = relationship("Lead", back_populates="files")

    @property
    def lead_name(self):
        return self.lead.name if self.lead else None
