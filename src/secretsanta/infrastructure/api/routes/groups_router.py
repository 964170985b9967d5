"""Router for groups, memberships and the santa draw.

Every route acts on behalf of the user named in the identity header.
"""

from fastapi import APIRouter, status

from secretsanta.core.logging import get_logger
from secretsanta.domain.entities import Group, Membership
from secretsanta.infrastructure.api.dependencies import ActingUser, GroupServiceDep
from secretsanta.infrastructure.api.schemas import (
    AdminPromote,
    CloseGroupResponse,
    GroupCreate,
    GroupResponse,
    MemberListResponse,
    MembershipResponse,
    RecipientResponse,
)

router = APIRouter(tags=["Groups"])
logger = get_logger(__name__)


@router.get(
    "",
    response_model=list[GroupResponse],
    summary="List open groups",
)
async def list_open_groups(service: GroupServiceDep) -> list[Group]:
    """List all groups that can still be joined."""
    return await service.list_open_groups()


@router.post(
    "",
    response_model=GroupResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new group",
)
async def create_group(
    group_data: GroupCreate,
    actor: ActingUser,
    service: GroupServiceDep,
) -> Group:
    """Create an open group. The creator becomes its first admin."""
    return await service.create_group(actor, group_data.name)


@router.delete(
    "/{group_name}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a group",
)
async def delete_group(group_name: str, actor: ActingUser, service: GroupServiceDep) -> None:
    """Delete a group. Admins only."""
    await service.delete_group(actor, group_name)


@router.post(
    "/{group_name}/members",
    response_model=MembershipResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Join a group",
)
async def join_group(group_name: str, actor: ActingUser, service: GroupServiceDep) -> Membership:
    """Join an open group as a member."""
    return await service.join_group(actor, group_name)


@router.get(
    "/{group_name}/members",
    response_model=MemberListResponse,
    summary="List group members",
)
async def list_members(
    group_name: str,
    actor: ActingUser,
    service: GroupServiceDep,
) -> MemberListResponse:
    """List the usernames of all members. Admins only."""
    members = await service.list_members(actor, group_name)
    return MemberListResponse(group=group_name, members=members)


@router.post(
    "/{group_name}/admins",
    response_model=MembershipResponse,
    summary="Promote a member to admin",
)
async def promote_admin(
    group_name: str,
    admin_data: AdminPromote,
    actor: ActingUser,
    service: GroupServiceDep,
) -> Membership:
    """Give the admin role to another member. Admins only."""
    return await service.promote_admin(actor, admin_data.username, group_name)


@router.delete(
    "/{group_name}/admins/me",
    response_model=MembershipResponse,
    summary="Revoke own admin rights",
)
async def demote_self(group_name: str, actor: ActingUser, service: GroupServiceDep) -> Membership:
    """Step down as admin. The last admin cannot step down."""
    return await service.demote_self(actor, group_name)


@router.post(
    "/{group_name}/close",
    response_model=CloseGroupResponse,
    summary="Close a group and draw santas",
)
async def close_group(
    group_name: str,
    actor: ActingUser,
    service: GroupServiceDep,
) -> CloseGroupResponse:
    """Close the group and draw one recipient per member. Admins only."""
    assignments = await service.close_group(actor, group_name)
    return CloseGroupResponse(group=group_name, assignments=len(assignments))


@router.get(
    "/{group_name}/recipient",
    response_model=RecipientResponse,
    summary="Get own recipient",
)
async def get_recipient(
    group_name: str,
    actor: ActingUser,
    service: GroupServiceDep,
) -> RecipientResponse:
    """Reveal the recipient drawn for the acting user."""
    recipient = await service.get_recipient(actor, group_name)
    logger.debug("Recipient revealed", group=group_name, santa=actor)
    return RecipientResponse(recipient=recipient)
