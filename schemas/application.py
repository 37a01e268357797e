from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from models import AgentType


class ApplicationRegister(BaseModel):
    """Register an application ahead of its first step; id is generated when omitted."""
    id: Optional[str] = Field(None, min_length=1, max_length=64)
    agent_type: AgentType
