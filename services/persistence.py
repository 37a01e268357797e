"""
Per-step write strategies. Each writer runs on the caller's session and never
commits; the onboarding engine owns the transaction.
"""
from __future__ import annotations

import uuid
from collections.abc import Iterable
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import (
    Attachment,
    BackgroundInformation,
    EducationalQualification,
    ExperienceDetail,
    FirmDetails,
    Personnel,
    ProfessionalQualification,
)
from schemas.steps import (
    BackgroundInformationForm,
    ExperienceForm,
    FirmDetailsForm,
    PersonForm,
    PersonnelForm,
    QualificationsForm,
)
from services.errors import PersistenceFailed


async def save_firm_details(session: AsyncSession, app_id: str, form: FirmDetailsForm) -> FirmDetails:
    """Upsert the single firm row for the application."""
    result = await session.execute(select(FirmDetails).where(FirmDetails.app_id == app_id))
    firm = result.scalar_one_or_none()
    if firm is None:
        firm = FirmDetails(app_id=app_id)
        session.add(firm)
    firm.firm_name = form.firm_name
    firm.registration_number = form.registration_number
    firm.pan_number = form.pan_number
    firm.gst_number = form.gst_number
    firm.correspondence_address = form.correspondence_address.to_storage_dict()
    firm.permanent_address = form.permanent_address.to_storage_dict()
    firm.email_address = str(form.email_address)
    firm.mobile_number = form.mobile_number
    await session.flush()
    return firm


def _apply_person(row: Personnel, person: PersonForm, photo: Optional[str]) -> None:
    row.title = person.title
    row.name = person.name
    row.father_name = person.father_name
    row.mother_name = person.mother_name
    row.date_of_birth = person.date_of_birth
    row.wealth_tax_registration = person.wealth_tax_registration
    row.wealth_tax_registration_details = person.wealth_tax_registration_details
    row.ibbi_registration_number = person.ibbi_registration_number
    row.pan_number = person.pan_number
    row.aadhaar_number = person.aadhaar_number
    row.passport_number = person.passport_number
    row.gst_number = person.gst_number
    row.correspondence_address = person.correspondence_address.to_storage_dict()
    row.permanent_address = person.permanent_address.to_storage_dict()
    row.email_address = str(person.email_address) if person.email_address else None
    row.mobile_number = person.mobile_number
    # An uploaded photo wins over the path echoed in the JSON payload
    row.photo_upload = photo or person.photo_upload or row.photo_upload
    row.is_same_as_correspondence = person.is_same_as_correspondence


async def save_personnel(
    session: AsyncSession,
    app_id: str,
    form: PersonnelForm,
    photos: Optional[dict[int, str]] = None,
) -> list[str]:
    """
    Upsert the roster by position. A position seen before keeps its personnel_id,
    new positions get a fresh one, and positions past the end of the new roster
    are deleted along with their qualifications and experience.
    Returns personnel ids in roster order.
    """
    photos = photos or {}
    result = await session.execute(select(Personnel).where(Personnel.app_id == app_id))
    existing = {p.position: p for p in result.scalars().all()}

    personnel_ids: list[str] = []
    for position, person in enumerate(form.personnel):
        row = existing.pop(position, None)
        if row is None:
            row = Personnel(personnel_id=str(uuid.uuid4()), app_id=app_id, position=position)
            session.add(row)
        _apply_person(row, person, photos.get(position))
        personnel_ids.append(row.personnel_id)

    for stale in existing.values():
        await session.delete(stale)
    await session.flush()
    return personnel_ids


async def _require_personnel(session: AsyncSession, app_id: str, personnel_ids: Iterable[str]) -> None:
    wanted = set(personnel_ids)
    if not wanted:
        return
    result = await session.execute(
        select(Personnel.personnel_id).where(
            Personnel.app_id == app_id,
            Personnel.personnel_id.in_(wanted),
        )
    )
    missing = wanted - set(result.scalars().all())
    if missing:
        raise PersistenceFailed(
            f"personnel_id not found for application {app_id}: {', '.join(sorted(missing))}"
        )


async def save_qualifications(session: AsyncSession, app_id: str, form: QualificationsForm) -> None:
    """Replace educational and professional qualifications per (application, person)."""
    await _require_personnel(session, app_id, (p.personnel_id for p in form.personnel))
    for person in form.personnel:
        await session.execute(
            delete(EducationalQualification).where(
                EducationalQualification.app_id == app_id,
                EducationalQualification.personnel_id == person.personnel_id,
            )
        )
        await session.execute(
            delete(ProfessionalQualification).where(
                ProfessionalQualification.app_id == app_id,
                ProfessionalQualification.personnel_id == person.personnel_id,
            )
        )
        session.add_all([
            EducationalQualification(
                app_id=app_id,
                personnel_id=person.personnel_id,
                qualification=edu.qualification,
                year_of_passing=edu.year_of_passing,
                marks_percent=edu.marks_percent,
                grade_class=edu.grade_class,
                university_college=edu.university_college,
                remarks=edu.remarks,
            )
            for edu in person.educational_qualifications or []
        ])
        session.add_all([
            ProfessionalQualification(
                app_id=app_id,
                personnel_id=person.personnel_id,
                qualification=prof.qualification,
                institute=prof.institute,
                membership_no=prof.membership_no,
                date_of_enrolment=prof.date_of_enrolment,
                remarks=prof.remarks,
            )
            for prof in person.professional_qualifications or []
        ])
        # Flush per person so a repeated personnel_id replaces, not appends
        await session.flush()


async def save_experience(session: AsyncSession, app_id: str, form: ExperienceForm) -> None:
    """Replace experience rows per (application, person)."""
    await _require_personnel(session, app_id, (p.personnel_id for p in form.personnel))
    for person in form.personnel:
        await session.execute(
            delete(ExperienceDetail).where(
                ExperienceDetail.app_id == app_id,
                ExperienceDetail.personnel_id == person.personnel_id,
            )
        )
        session.add_all([
            ExperienceDetail(
                app_id=app_id,
                personnel_id=person.personnel_id,
                currently_in_practice_or_employment=exp.currently_in_practice_or_employment,
                years_in_practice=exp.years_in_practice,
                practice_address=exp.practice_address,
                years_in_employment=exp.years_in_employment,
                months_in_employment=exp.months_in_employment,
                evidence_files=exp.evidence_files or [],
                from_date=exp.from_date,
                to_date=exp.to_date,
                employment_or_practice=exp.employment_or_practice,
                employer_name_and_designation=exp.employer_name_and_designation,
                practice_experience=exp.practice_experience,
                area_of_work=exp.area_of_work,
            )
            for exp in person.experience_details or []
        ])
        await session.flush()


async def save_background(
    session: AsyncSession, app_id: str, form: BackgroundInformationForm
) -> BackgroundInformation:
    """Upsert the single background-information row for the application."""
    result = await session.execute(
        select(BackgroundInformation).where(BackgroundInformation.app_id == app_id)
    )
    info = result.scalar_one_or_none()
    if info is None:
        info = BackgroundInformation(app_id=app_id)
        session.add(info)
    info.convicted_offence = form.convicted_offence
    info.convicted_offence_details = form.convicted_offence_details
    info.criminal_proceedings = form.criminal_proceedings
    info.criminal_proceedings_details = form.criminal_proceedings_details
    info.undischarged_bankrupt = form.undischarged_bankrupt
    info.undischarged_bankrupt_details = form.undischarged_bankrupt_details
    info.additional_information = form.additional_information
    await session.flush()
    return info


async def save_attachments(session: AsyncSession, attachments: list[Attachment]) -> None:
    """Append-only: existing attachment rows are never replaced."""
    session.add_all(attachments)
    await session.flush()
