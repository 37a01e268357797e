from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from database import Base


class Personnel(Base):
    __tablename__ = "personnel"
    __table_args__ = (UniqueConstraint("app_id", "position", name="uq_personnel_app_position"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    personnel_id = Column(String(36), unique=True, nullable=False, index=True)
    app_id = Column(String(64), ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True)
    # Index within the submitted roster; resubmissions update rows in place by position
    position = Column(Integer, nullable=False)
    title = Column(String(10), nullable=True)
    name = Column(String(255), nullable=False)
    father_name = Column(String(255), nullable=True)
    mother_name = Column(String(255), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    wealth_tax_registration = Column(String(20), nullable=True)
    wealth_tax_registration_details = Column(String(255), nullable=True)
    ibbi_registration_number = Column(String(100), nullable=True)
    pan_number = Column(String(10), nullable=False, index=True)
    aadhaar_number = Column(String(12), nullable=True, index=True)
    passport_number = Column(String(20), nullable=True)
    gst_number = Column(String(15), nullable=True)
    correspondence_address = Column(JSON, nullable=False)
    permanent_address = Column(JSON, nullable=False)
    email_address = Column(String(255), nullable=True)
    mobile_number = Column(String(15), nullable=True)
    photo_upload = Column(String(255), nullable=True)
    is_same_as_correspondence = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    application = relationship("Application", back_populates="personnel")
    educational_qualifications = relationship(
        "EducationalQualification", order_by="EducationalQualification.id",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    professional_qualifications = relationship(
        "ProfessionalQualification", order_by="ProfessionalQualification.id",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    experience_details = relationship(
        "ExperienceDetail", order_by="ExperienceDetail.id",
        cascade="all, delete-orphan", passive_deletes=True,
    )


class EducationalQualification(Base):
    __tablename__ = "educational_qualifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    app_id = Column(String(64), ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True)
    personnel_id = Column(
        String(36), ForeignKey("personnel.personnel_id", ondelete="CASCADE"), nullable=False, index=True
    )
    qualification = Column(String(255), nullable=False)
    year_of_passing = Column(Integer, nullable=True)
    marks_percent = Column(Numeric(5, 2, asdecimal=False), nullable=True)
    grade_class = Column(String(50), nullable=True)
    university_college = Column(String(255), nullable=True)
    remarks = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class ProfessionalQualification(Base):
    __tablename__ = "professional_qualifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    app_id = Column(String(64), ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True)
    personnel_id = Column(
        String(36), ForeignKey("personnel.personnel_id", ondelete="CASCADE"), nullable=False, index=True
    )
    qualification = Column(String(255), nullable=False)
    institute = Column(String(255), nullable=True)
    membership_no = Column(String(100), nullable=True, index=True)
    date_of_enrolment = Column(Date, nullable=True)
    remarks = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class ExperienceDetail(Base):
    __tablename__ = "experience_details"

    id = Column(Integer, primary_key=True, autoincrement=True)
    app_id = Column(String(64), ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True)
    personnel_id = Column(
        String(36), ForeignKey("personnel.personnel_id", ondelete="CASCADE"), nullable=False, index=True
    )
    currently_in_practice_or_employment = Column(String(20), nullable=True)
    years_in_practice = Column(Integer, nullable=True)
    practice_address = Column(Text, nullable=True)
    years_in_employment = Column(Integer, nullable=True)
    months_in_employment = Column(Integer, nullable=True)
    evidence_files = Column(JSON, nullable=False, default=list)
    from_date = Column(Date, nullable=True)
    to_date = Column(Date, nullable=True)
    employment_or_practice = Column(String(100), nullable=True)
    employer_name_and_designation = Column(String(255), nullable=True)
    practice_experience = Column(String(255), nullable=True)
    area_of_work = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
