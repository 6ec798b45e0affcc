"""Agent provisioning: forwards to the create-agent function."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from tripdesk.core.deps import oauth2_scheme, require_role
from tripdesk.core.security import ADMIN_ROLES
from tripdesk.db.session import get_session
from tripdesk.schemas.agent import AgentCreate, AgentCreated
from tripdesk.services import audit as audit_svc
from tripdesk.services.functions import FunctionError, FunctionsClient, get_functions_client

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=AgentCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Create an agent account (Admin)",
)
async def create_agent(
    body: AgentCreate,
    token: Annotated[str, Depends(oauth2_scheme)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[object, Depends(require_role(*ADMIN_ROLES))],
    functions: Annotated[FunctionsClient, Depends(get_functions_client)],
):
    try:
        payload = await functions.create_agent(
            token,
            email=body.email,
            password=body.password,
            first_name=body.first_name,
            last_name=body.last_name,
            role=body.role,
        )
    except FunctionError as exc:
        # 4xx from the function is the caller's problem; anything else is ours
        if exc.status_code is not None and exc.status_code < 500:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))

    user = payload.get("user") or {}
    await audit_svc.log(
        db,
        current_user,
        action="agent.created",
        resource_type="profiles",
        resource_id=user.get("id"),
        details={"email": body.email, "role": body.role},
    )
    return AgentCreated(success=bool(payload.get("success")), user=user or None)
