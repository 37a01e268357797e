"""
Reassembles an application from its normalized tables into the nested,
camelCase shape the write path accepts.
"""
from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from models import AgentType, BackgroundInformation, FirmDetails, Personnel
from schemas.steps import (
    STEP_BACKGROUND,
    STEP_EXPERIENCE,
    STEP_FIRM,
    STEP_PERSONNEL,
    STEP_QUALIFICATIONS,
    TERMINAL_STEP,
    BackgroundInformationForm,
    EducationalQualificationForm,
    ExperienceDetailForm,
    FirmDetailsForm,
    PersonForm,
    ProfessionalQualificationForm,
)
from services.applicant_type import legal_steps
from services.errors import NotFound
from services.state import get_application
from utils.case import row_to_camel

# Steps 1-3 all live in the personnel tables and are served as one block
STEP_BLOCKS = {
    STEP_FIRM: STEP_FIRM,
    STEP_PERSONNEL: STEP_PERSONNEL,
    STEP_QUALIFICATIONS: STEP_PERSONNEL,
    STEP_EXPERIENCE: STEP_PERSONNEL,
    STEP_BACKGROUND: STEP_BACKGROUND,
    TERMINAL_STEP: TERMINAL_STEP,
}


# Client-supplied JSON, returned exactly as stored
CLIENT_JSON_FIELDS = frozenset({"evidence_files"})

async def _firm_block(session: AsyncSession, app_id: str) -> dict[str, Any]:
    result = await session.execute(select(FirmDetails).where(FirmDetails.app_id == app_id))
    firm = result.scalar_one_or_none()
    return {"firmDetails": row_to_camel(firm, FirmDetailsForm.model_fields) if firm else {}}


def _person_to_dict(person: Personnel) -> dict[str, Any]:
    out = {"personnel_id": person.personnel_id}
    out.update(row_to_camel(person, PersonForm.model_fields))
    out["educationalQualifications"] = [
        row_to_camel(q, EducationalQualificationForm.model_fields) for q in person.educational_qualifications
    ]
    out["professionalQualifications"] = [
        row_to_camel(q, ProfessionalQualificationForm.model_fields) for q in person.professional_qualifications
    ]
    out["experienceDetails"] = [
        row_to_camel(e, ExperienceDetailForm.model_fields, verbatim=CLIENT_JSON_FIELDS)
        for e in person.experience_details
    ]
    return out


async def _personnel_block(session: AsyncSession, app_id: str) -> dict[str, Any]:
    result = await session.execute(
        select(Personnel)
        .options(
            selectinload(Personnel.educational_qualifications),
            selectinload(Personnel.professional_qualifications),
            selectinload(Personnel.experience_details),
        )
        .where(Personnel.app_id == app_id)
        .order_by(Personnel.position)
    )
    return {"personnel": [_person_to_dict(p) for p in result.scalars().all()]}


async def _background_block(session: AsyncSession, app_id: str) -> dict[str, Any]:
    result = await session.execute(
        select(BackgroundInformation).where(BackgroundInformation.app_id == app_id)
    )
    info = result.scalar_one_or_none()
    return {
        "backgroundInfo": row_to_camel(info, BackgroundInformationForm.model_fields) if info else {}
    }


async def _attachments_block(session: AsyncSession, app_id: str) -> dict[str, Any]:
    # Uploaded files are not reconstructed into the read view
    return {"attachments": {}}


BLOCK_BUILDERS = {
    STEP_FIRM: _firm_block,
    STEP_PERSONNEL: _personnel_block,
    STEP_BACKGROUND: _background_block,
    TERMINAL_STEP: _attachments_block,
}


async def assemble(session: AsyncSession, application_id: str, step: Optional[int] = None) -> dict[str, Any]:
    """Build the full application, or only the block serving `step`."""
    app = await get_application(session, application_id)
    if app is None:
        raise NotFound("Application not found")

    legal = legal_steps(AgentType(app.agent_type))
    if step is None:
        blocks = [b for b in BLOCK_BUILDERS if b in legal]
    else:
        if step not in legal:
            raise NotFound(f"Step {step} not found for {app.agent_type} application")
        blocks = [STEP_BLOCKS[step]]

    steps: dict[str, Any] = {}
    for block in blocks:
        steps[str(block)] = await BLOCK_BUILDERS[block](session, app.id)

    return {
        "request_uuid": app.id,
        "agent_type": app.agent_type,
        "current_step": app.current_step,
        "status": app.status,
        "submitted_at": app.submitted_at.isoformat() if app.submitted_at else None,
        "steps": steps,
    }
