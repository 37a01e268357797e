from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models import AgentType, Application
from schemas.steps import STEP_FIRM, STEP_PERSONNEL, TERMINAL_STEP
from services.errors import InvalidStep, UnknownApplication


async def resolve_agent_type(session: AsyncSession, application_id: str) -> AgentType:
    """Return the stored category for an application id, or raise UnknownApplication."""
    result = await session.execute(select(Application.agent_type).where(Application.id == application_id))
    agent_type = result.scalar_one_or_none()
    if agent_type is None:
        raise UnknownApplication(
            f"Unknown application {application_id}. Must be a registered INDIVIDUAL or CORPORATE application."
        )
    return AgentType(agent_type)


def legal_steps(agent_type: AgentType) -> range:
    """
    CORPORATE applications start with the firm-details step; INDIVIDUAL ones skip it.
    Both end with the shared terminal attachments step.
    """
    first = STEP_FIRM if agent_type == AgentType.CORPORATE else STEP_PERSONNEL
    return range(first, TERMINAL_STEP + 1)


def check_step(agent_type: AgentType, step: int) -> None:
    steps = legal_steps(agent_type)
    if step not in steps:
        raise InvalidStep(
            f"Invalid step_number. Must be between {steps.start} and {steps.stop - 1} "
            f"for {agent_type.value} type."
        )
