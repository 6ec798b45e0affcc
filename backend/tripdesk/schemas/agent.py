from typing import Any

from pydantic import BaseModel, EmailStr, Field

from tripdesk.core.security import Role


class AgentCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    role: Role = "Agent"


class AgentCreated(BaseModel):
    success: bool
    user: dict[str, Any] | None = None
