import enum

from sqlalchemy import Column, DateTime, Integer, String, func
from sqlalchemy.orm import relationship

from database import Base


class AgentType(str, enum.Enum):
    INDIVIDUAL = "INDIVIDUAL"
    CORPORATE = "CORPORATE"


class ApplicationStatus(str, enum.Enum):
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class Application(Base):
    __tablename__ = "applications"

    id = Column(String(64), primary_key=True, index=True)
    agent_type = Column(String(20), nullable=False)
    current_step = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default=ApplicationStatus.IN_PROGRESS.value, index=True)
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Children are removed by ON DELETE CASCADE in the database
    firm_details = relationship(
        "FirmDetails", back_populates="application", uselist=False,
        cascade="all, delete-orphan", passive_deletes=True,
    )
    personnel = relationship(
        "Personnel", back_populates="application", order_by="Personnel.position",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    background_information = relationship(
        "BackgroundInformation", back_populates="application", uselist=False,
        cascade="all, delete-orphan", passive_deletes=True,
    )
    attachments = relationship(
        "Attachment", back_populates="application",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    @property
    def is_completed(self) -> bool:
        return self.status == ApplicationStatus.COMPLETED.value
