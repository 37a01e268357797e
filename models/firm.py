from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import relationship

from database import Base


class FirmDetails(Base):
    __tablename__ = "firm_details"

    id = Column(Integer, primary_key=True, autoincrement=True)
    app_id = Column(
        String(64), ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False, unique=True, index=True,
    )
    firm_name = Column(String(255), nullable=False)
    registration_number = Column(String(100), nullable=True)
    pan_number = Column(String(10), nullable=False, index=True)
    gst_number = Column(String(15), nullable=True)
    # Address value objects (snake_case keys), see schemas.common.Address
    correspondence_address = Column(JSON, nullable=False)
    permanent_address = Column(JSON, nullable=False)
    email_address = Column(String(255), nullable=False, index=True)
    mobile_number = Column(String(15), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    application = relationship("Application", back_populates="firm_details")
