from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import relationship

from database import Base


class Attachment(Base):
    """Uploaded file metadata. Append-only: resubmitting a step never removes rows."""

    __tablename__ = "attachments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    app_id = Column(String(64), ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True)
    personnel_id = Column(
        String(36), ForeignKey("personnel.personnel_id", ondelete="SET NULL"), nullable=True, index=True
    )
    # "{CATEGORY}_{form field name}", e.g. FIRM_DETAILS_registration_certificate
    document_type = Column(String(255), nullable=False, index=True)
    file_name = Column(String(255), nullable=False)
    original_name = Column(String(255), nullable=True)
    file_path = Column(String(500), nullable=False)
    file_size = Column(Integer, nullable=False, default=0)
    content_type = Column(String(128), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    application = relationship("Application", back_populates="attachments")
