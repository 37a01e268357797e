"""
Application state tracker: current-step pointer and lifecycle status.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models import AgentType, Application, ApplicationStatus
from services.errors import ApplicationCompleted


async def get_application(session: AsyncSession, application_id: str) -> Optional[Application]:
    result = await session.execute(select(Application).where(Application.id == application_id))
    return result.scalar_one_or_none()


async def create_application(
    session: AsyncSession,
    application_id: str,
    agent_type: AgentType,
    current_step: int,
) -> Application:
    app = Application(
        id=application_id,
        agent_type=agent_type.value,
        current_step=current_step,
        status=ApplicationStatus.IN_PROGRESS.value,
    )
    session.add(app)
    await session.flush()
    return app


def ensure_writable(app: Application) -> None:
    if app.is_completed:
        raise ApplicationCompleted(f"Application {app.id} is already completed and can no longer be edited")


def advance(app: Application, step: int) -> None:
    """Move the pointer forward to `step`; an earlier step never moves it back."""
    if step >= app.current_step:
        app.current_step = step
        app.updated_at = datetime.now(timezone.utc)


def complete(app: Application) -> None:
    now = datetime.now(timezone.utc)
    app.status = ApplicationStatus.COMPLETED.value
    app.submitted_at = now
    app.updated_at = now
