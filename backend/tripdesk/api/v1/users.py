"""Current user endpoint."""
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from tripdesk.core.deps import get_current_user
from tripdesk.models.profile import Profile

router = APIRouter()


class CurrentUserResponse(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    role: str


@router.get("/me", response_model=CurrentUserResponse, summary="Get current authenticated user info")
async def get_current_user_info(
    current_user: Annotated[Profile, Depends(get_current_user)],
):
    return CurrentUserResponse(
        id=str(current_user.id),
        email=current_user.email,
        first_name=current_user.first_name,
        last_name=current_user.last_name,
        role=current_user.role,
    )
