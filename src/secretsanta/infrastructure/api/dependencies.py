"""FastAPI dependencies for the acting user and domain services.

The acting user is whoever the configured identity header names. There is no
authentication behind it: the caller asserts who they are.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from secretsanta.core.config import get_settings
from secretsanta.core.logging import get_logger
from secretsanta.domain.services import GroupService
from secretsanta.infrastructure.persistence.database import get_db_session

logger = get_logger(__name__)


async def get_acting_user(request: Request) -> str:
    """Read the acting username from the identity header.

    Raises:
        HTTPException: 400 if the header is missing or blank.
    """
    header = get_settings().actor_header
    username = (request.headers.get(header) or "").strip()
    if not username:
        logger.info("Request rejected: missing acting user header", header=header)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Missing {header} header",
        )
    return username


def get_group_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> GroupService:
    """Get the group service bound to the request's session."""
    return GroupService(session)


ActingUser = Annotated[str, Depends(get_acting_user)]
GroupServiceDep = Annotated[GroupService, Depends(get_group_service)]
