"""
Per-step form contracts.

Step indices are fixed across applicant categories:
0 firm details, 1 personnel roster, 2 qualifications, 3 experience,
4 background information, 5 terminal attachments.
"""
from __future__ import annotations

from datetime import date
from typing import Any, Optional, Union

from pydantic import BaseModel, EmailStr, Field, field_validator

from models import AgentType
from schemas.common import (
    Address,
    CamelModel,
    MobileNumber,
    OptionalAadhaar,
    OptionalEmail,
    OptionalMobileNumber,
    OptionalStr,
    PanNumber,
    RequiredStr,
    YesNo,
)

STEP_FIRM = 0
STEP_PERSONNEL = 1
STEP_QUALIFICATIONS = 2
STEP_EXPERIENCE = 3
STEP_BACKGROUND = 4
STEP_ATTACHMENTS = 5
TERMINAL_STEP = STEP_ATTACHMENTS

ACTION_SAVE = "SAVE"
ACTION_SUBMIT = "SUBMIT"


# ---- Step 0 -------------------------------------------------------------

class FirmDetailsForm(CamelModel):
    firm_name: RequiredStr
    registration_number: RequiredStr
    pan_number: PanNumber
    gst_number: OptionalStr = None
    correspondence_address: Address
    permanent_address: Address
    email_address: EmailStr
    mobile_number: MobileNumber


# ---- Step 1 -------------------------------------------------------------

class PersonForm(CamelModel):
    title: RequiredStr
    name: RequiredStr
    father_name: OptionalStr = None
    mother_name: OptionalStr = None
    date_of_birth: date
    wealth_tax_registration: Optional[YesNo] = None
    wealth_tax_registration_details: OptionalStr = None
    ibbi_registration_number: OptionalStr = None
    pan_number: PanNumber
    aadhaar_number: OptionalAadhaar = None
    passport_number: OptionalStr = None
    gst_number: OptionalStr = None
    correspondence_address: Address
    permanent_address: Address
    email_address: OptionalEmail = None
    mobile_number: OptionalMobileNumber = None
    photo_upload: OptionalStr = None
    is_same_as_correspondence: bool = False


class PersonnelForm(CamelModel):
    personnel: list[PersonForm]


# ---- Step 2 -------------------------------------------------------------

class EducationalQualificationForm(CamelModel):
    qualification: RequiredStr
    year_of_passing: int
    marks_percent: float = Field(..., ge=0, le=100)
    grade_class: RequiredStr
    university_college: RequiredStr
    remarks: OptionalStr = None

    @field_validator("year_of_passing")
    @classmethod
    def _year_not_in_future(cls, v: int) -> int:
        current = date.today().year
        if v < 1900 or v > current:
            raise ValueError(f"must be between 1900 and {current}")
        return v


class ProfessionalQualificationForm(CamelModel):
    qualification: RequiredStr
    institute: RequiredStr
    membership_no: RequiredStr
    date_of_enrolment: date
    remarks: OptionalStr = None


class PersonQualificationsForm(CamelModel):
    personnel_id: RequiredStr = Field(..., alias="personnel_id")
    educational_qualifications: Optional[list[EducationalQualificationForm]] = None
    professional_qualifications: Optional[list[ProfessionalQualificationForm]] = None


class QualificationsForm(CamelModel):
    personnel: list[PersonQualificationsForm]


# ---- Step 3 -------------------------------------------------------------

class ExperienceDetailForm(CamelModel):
    currently_in_practice_or_employment: OptionalStr = None
    years_in_practice: Optional[int] = Field(None, ge=0)
    practice_address: OptionalStr = None
    years_in_employment: Optional[int] = Field(None, ge=0)
    months_in_employment: Optional[int] = Field(None, ge=0, le=11)
    evidence_files: Optional[list[Any]] = None
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    employment_or_practice: OptionalStr = None
    employer_name_and_designation: OptionalStr = None
    practice_experience: OptionalStr = None
    area_of_work: OptionalStr = None


class PersonExperienceForm(CamelModel):
    personnel_id: RequiredStr = Field(..., alias="personnel_id")
    experience_details: Optional[list[ExperienceDetailForm]] = None


class ExperienceForm(CamelModel):
    personnel: list[PersonExperienceForm]


# ---- Step 4 -------------------------------------------------------------

class BackgroundInformationForm(CamelModel):
    convicted_offence: YesNo
    convicted_offence_details: OptionalStr = None
    criminal_proceedings: YesNo
    criminal_proceedings_details: OptionalStr = None
    undischarged_bankrupt: YesNo
    undischarged_bankrupt_details: OptionalStr = None
    additional_information: OptionalStr = None


# ---- Step 5 -------------------------------------------------------------

class TerminalAttachmentsForm(BaseModel):
    """JSON echo of uploaded filenames, keyed by document category (snake_case on the wire)."""
    ibbi_certificate: list[str]
    wealth_tax_certificate: list[str]
    valuers_org_membership: list[str]
    professional_bodies: list[str]
    kyc_documents: list[str]
    pan_card: list[str]
    address_proof: list[str]
    education_certificates: list[str]
    professional_certificates: list[str]
    experience_documents: list[str]
    employment_certificates: list[str]
    it_returns: list[str]
    gst_registration: list[str]
    cancelled_cheque: list[str]
    photographs: list[str]
    moa_aoa: list[str]
    partnership_deed: list[str]
    company_profile: list[str]
    board_resolution: list[str]
    authorized_signatory: list[str]


# ---- Envelope -----------------------------------------------------------

class StepEnvelope(BaseModel):
    """
    Outer shape shared by every step. form_data is either the parsed object or,
    for multipart requests, a JSON-encoded string.
    """
    step_number: Union[int, str]
    action: str
    form_data: Union[dict[str, Any], str, None] = None
    agent_type: Optional[AgentType] = None


StepForm = Union[
    FirmDetailsForm,
    PersonnelForm,
    QualificationsForm,
    ExperienceForm,
    BackgroundInformationForm,
    TerminalAttachmentsForm,
]
