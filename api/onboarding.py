from __future__ import annotations

import uuid
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from database import get_db
from schemas.application import ApplicationRegister
from services import state
from services.applicant_type import legal_steps
from services.errors import ValidationFailed
from services.onboarding import submit_step
from services.read_model import assemble

router = APIRouter(prefix="/api/agency-onboarding", tags=["agency-onboarding"])

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


async def _read_submission(request: Request) -> tuple[dict[str, Any], list[tuple[str, UploadFile]]]:
    """Split a request into the step envelope and its file parts (multipart) or take the JSON body."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        raw: dict[str, Any] = {}
        uploads: list[tuple[str, UploadFile]] = []
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                uploads.append((key, value))
            else:
                raw[key] = value
        return raw, uploads

    try:
        body = await request.json()
    except ValueError as e:
        raise ValidationFailed("Request body must be JSON or multipart/form-data") from e
    if not isinstance(body, dict):
        raise ValidationFailed("Request body must be a JSON object")
    return body, []


@router.post("", status_code=201)
async def register_application(body: ApplicationRegister, db: AsyncSession = Depends(get_db)):
    app_id = body.id or str(uuid.uuid4())
    async with db.begin():
        if await state.get_application(db, app_id) is not None:
            raise ValidationFailed(
                "Validation error",
                details=[{"field": "id", "message": "application already registered", "type": "duplicate"}],
            )
        app = await state.create_application(db, app_id, body.agent_type, legal_steps(body.agent_type).start)
    return {
        "success": True,
        "data": {
            "request_uuid": app.id,
            "agent_type": app.agent_type,
            "current_step": app.current_step,
            "status": app.status,
        },
    }


@router.post("/{application_id}")
async def submit_application_step(application_id: str, request: Request, db: AsyncSession = Depends(get_db)):
    settings = request.app.state.settings
    raw, uploads = await _read_submission(request)
    data = await submit_step(
        db,
        request.app.state.storage,
        application_id,
        raw,
        uploads,
        max_file_bytes=settings.max_upload_bytes,
        max_files=settings.max_files_per_request,
    )
    return {"success": True, "data": data}


@router.get("/{application_id}")
async def get_application(
    application_id: str,
    step: Optional[int] = Query(None, ge=0, description="Only return the block serving this step"),
    db: AsyncSession = Depends(get_db),
):
    data = await assemble(db, application_id, step)
    return {"success": True, "data": data}
