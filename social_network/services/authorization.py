"""
Authorization policy shared by every router.

Social-network admins bypass every check. Ordinary users are checked against
resource ownership (``owner_id``) or their chat membership.
"""
from enum import Enum
from typing import Optional
import logging

from social_network.exceptions import AccessDeniedError
from social_network.models.chat import ChatMember
from social_network.schemas.auth_schema import AuthenticatedUser

logger = logging.getLogger(__name__)

class Action(str, Enum):
    ACT_AS_USER = "act_as_user"
    VIEW_CHAT = "view_chat"
    POST_MESSAGE = "post_message"
    ADD_MEMBER = "add_member"
    EDIT_CHAT = "edit_chat"
    REMOVE_MEMBER = "remove_member"
    CHANGE_MEMBER_ROLE = "change_member_role"
    DELETE_CHAT = "delete_chat"

_MEMBER_ACTIONS = {Action.VIEW_CHAT, Action.POST_MESSAGE, Action.ADD_MEMBER}
_CHAT_ADMIN_ACTIONS = {Action.EDIT_CHAT, Action.REMOVE_MEMBER, Action.CHANGE_MEMBER_ROLE}
_CHAT_OWNER_ACTIONS = {Action.DELETE_CHAT}

def _denial_reason(
    principal: AuthenticatedUser,
    action: Action,
    owner_id: Optional[int],
    membership: Optional[ChatMember],
) -> Optional[str]:
    if principal.is_admin:
        return None

    if action == Action.ACT_AS_USER:
        if owner_id is None or owner_id != principal.id:
            return "You can't act on behalf of another user"
        return None

    if membership is None or membership.user_id != principal.id:
        return "User isn't chat member"
    if action in _MEMBER_ACTIONS:
        return None
    if action in _CHAT_ADMIN_ACTIONS:
        return None if membership.is_admin else "User hasn't chat admin permissions"
    if action in _CHAT_OWNER_ACTIONS:
        return None if membership.is_owner else "You are not chat Owner"
    return "Action is not allowed"

def is_authorized(
    principal: AuthenticatedUser,
    action: Action,
    *,
    owner_id: Optional[int] = None,
    membership: Optional[ChatMember] = None,
) -> bool:
    return _denial_reason(principal, action, owner_id, membership) is None

def authorize(
    principal: AuthenticatedUser,
    action: Action,
    *,
    owner_id: Optional[int] = None,
    membership: Optional[ChatMember] = None,
) -> None:
    """Raise AccessDeniedError unless ``principal`` may perform ``action``"""
    reason = _denial_reason(principal, action, owner_id, membership)
    if reason is not None:
        logger.info(f"Denied {action.value} for user {principal.id}: {reason}")
        raise AccessDeniedError(reason)
