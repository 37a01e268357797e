"""
Step-progression engine.

submit_step() runs the whole write path for one request inside a single
transaction: resolve the applicant category, check the step range, validate
the envelope, route uploaded files, then apply_step() writes the step's rows,
stores files and advances the application state. Any failure rolls the
transaction back and removes files written during the request.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession

from models import AgentType, Application, Attachment
from schemas.steps import (
    ACTION_SUBMIT,
    STEP_BACKGROUND,
    STEP_EXPERIENCE,
    STEP_FIRM,
    STEP_PERSONNEL,
    STEP_QUALIFICATIONS,
    TERMINAL_STEP,
    PersonnelForm,
)
from services import persistence, state
from services.applicant_type import check_step, resolve_agent_type
from services.attachments import AcceptedFile, RoutedFiles, Upload, route_uploads
from services.errors import (
    OnboardingError,
    PersistenceFailed,
    StorageUnavailable,
    UnknownApplication,
    ValidationFailed,
)
from services.storage import FileStorage, StoredFile
from services.validation import StepSubmission, parse_step_number, validate_submission

logger = logging.getLogger(__name__)


def _declared_agent_type(raw: dict[str, Any], application_id: str) -> AgentType:
    declared = raw.get("agent_type")
    if not declared:
        raise UnknownApplication(
            f"Unknown application {application_id}. Supply agent_type (INDIVIDUAL or CORPORATE) to start one."
        )
    try:
        return AgentType(declared)
    except ValueError as e:
        raise ValidationFailed(
            "Validation error",
            details=[{"field": "agent_type", "message": "must be INDIVIDUAL or CORPORATE", "type": "enum"}],
        ) from e


class _FileWriter:
    """Stores accepted files for one request and remembers them for rollback cleanup."""

    def __init__(self, storage: FileStorage, application_id: str):
        self.storage = storage
        self.application_id = application_id
        self.written: list[StoredFile] = []

    def store(self, accepted: AcceptedFile) -> StoredFile:
        stored = self.storage.save(self.application_id, accepted.original_name, accepted.content)
        self.written.append(stored)
        return stored

    def discard(self) -> None:
        for stored in self.written:
            self.storage.remove(stored)
        self.written.clear()


def _attachment_rows(
    app_id: str,
    routed: RoutedFiles,
    files: _FileWriter,
    personnel_ids: Optional[list[str]] = None,
) -> list[Attachment]:
    rows = []
    for accepted in routed.documents():
        stored = files.store(accepted)
        personnel_id = None
        if personnel_ids is not None and accepted.personnel_index is not None:
            personnel_id = personnel_ids[accepted.personnel_index]
        rows.append(
            Attachment(
                app_id=app_id,
                personnel_id=personnel_id,
                document_type=routed.document_type(accepted),
                file_name=stored.file_name,
                original_name=accepted.original_name,
                file_path=stored.file_path,
                file_size=stored.size,
                content_type=accepted.content_type,
            )
        )
    return rows


async def apply_step(
    session: AsyncSession,
    app: Application,
    submission: StepSubmission,
    routed: RoutedFiles,
    files: _FileWriter,
) -> dict[str, Any]:
    """
    Persist one validated step for an existing application. Must run inside the
    caller's transaction; nothing here commits.
    """
    step = submission.step
    form = submission.form
    data: dict[str, Any] = {"step_number": step, "action": "SUCCESS"}
    attachments: list[Attachment] = []

    state.advance(app, step)

    if step == STEP_FIRM:
        await persistence.save_firm_details(session, app.id, form)
        attachments = _attachment_rows(app.id, routed, files)
    elif step == STEP_PERSONNEL:
        photos = {index: files.store(photo).file_name for index, photo in routed.photos().items()}
        personnel_ids = await persistence.save_personnel(session, app.id, form, photos)
        attachments = _attachment_rows(app.id, routed, files, personnel_ids)
        data["personnel_ids"] = personnel_ids
    elif step == STEP_QUALIFICATIONS:
        await persistence.save_qualifications(session, app.id, form)
    elif step == STEP_EXPERIENCE:
        await persistence.save_experience(session, app.id, form)
        attachments = _attachment_rows(app.id, routed, files)
    elif step == STEP_BACKGROUND:
        await persistence.save_background(session, app.id, form)
    elif step == TERMINAL_STEP:
        attachments = _attachment_rows(app.id, routed, files)
        if submission.action == ACTION_SUBMIT:
            state.complete(app)
            data["message"] = "Application submitted successfully"

    if attachments:
        await persistence.save_attachments(session, attachments)
        data["attachments"] = [
            {"document_type": a.document_type, "file_name": a.file_name, "file_size": a.file_size}
            for a in attachments
        ]
    await session.flush()
    return data


async def submit_step(
    session: AsyncSession,
    storage: FileStorage,
    application_id: str,
    raw: dict[str, Any],
    uploads: Sequence[tuple[str, Upload]] = (),
    *,
    max_file_bytes: int,
    max_files: int,
) -> dict[str, Any]:
    """Validate and persist one step submission atomically; returns the step's echo data."""
    files = _FileWriter(storage, application_id)
    try:
        step = parse_step_number(raw.get("step_number"))
        async with session.begin():
            app = await state.get_application(session, application_id)
            try:
                agent_type = await resolve_agent_type(session, application_id)
            except UnknownApplication:
                agent_type = _declared_agent_type(raw, application_id)
            if app is not None:
                state.ensure_writable(app)

            check_step(agent_type, step)
            submission = validate_submission(step, raw)
            if submission.agent_type is not None and submission.agent_type != agent_type:
                raise ValidationFailed(
                    "Validation error",
                    details=[{
                        "field": "agent_type",
                        "message": f"application is registered as {agent_type.value}",
                        "type": "immutable",
                    }],
                )

            roster_size = len(submission.form.personnel) if isinstance(submission.form, PersonnelForm) else None
            routed = await route_uploads(
                step,
                uploads,
                max_file_bytes=max_file_bytes,
                max_files=max_files,
                roster_size=roster_size,
            )

            if app is None:
                app = await state.create_application(session, application_id, agent_type, step)
            data = await apply_step(session, app, submission, routed, files)
    except OnboardingError as e:
        files.discard()
        logger.warning("Rejected step submission for %s: %s (%s)", application_id, e.reason, e.message)
        raise
    except PoolTimeoutError as e:
        files.discard()
        logger.error("Connection pool exhausted while applying step for %s", application_id)
        raise StorageUnavailable("Database connection pool exhausted, retry later") from e
    except (SQLAlchemyError, OSError) as e:
        files.discard()
        logger.exception("Step write rolled back for %s", application_id)
        raise PersistenceFailed(str(getattr(e, "orig", None) or e)) from e
    except BaseException:
        files.discard()
        logger.exception("Step write aborted for %s", application_id)
        raise

    logger.info("Applied step %d for application %s", step, application_id)
    return data
