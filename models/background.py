from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from database import Base


class BackgroundInformation(Base):
    __tablename__ = "background_information"

    id = Column(Integer, primary_key=True, autoincrement=True)
    app_id = Column(
        String(64), ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False, unique=True, index=True,
    )
    convicted_offence = Column(String(20), nullable=False)
    convicted_offence_details = Column(Text, nullable=True)
    criminal_proceedings = Column(String(20), nullable=False)
    criminal_proceedings_details = Column(Text, nullable=True)
    undischarged_bankrupt = Column(String(20), nullable=False)
    undischarged_bankrupt_details = Column(Text, nullable=True)
    additional_information = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    application = relationship("Application", back_populates="background_information")
