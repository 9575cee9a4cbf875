import pytest

from social_network.exceptions import AccessDeniedError
from social_network.models.chat import ChatMember, ChatMemberType
from social_network.models.user import UserRole
from social_network.schemas.auth_schema import AuthenticatedUser
from social_network.services.authorization import Action, authorize, is_authorized

USER = AuthenticatedUser(id=1, role=UserRole.USER, username="alice")
ADMIN = AuthenticatedUser(id=99, role=UserRole.ADMIN, username="admin")


def membership(member_type: str, user_id: int = 1) -> ChatMember:
    return ChatMember(chat_id=10, user_id=user_id, type=member_type)


def test_act_as_self_only():
    assert is_authorized(USER, Action.ACT_AS_USER, owner_id=1)
    assert not is_authorized(USER, Action.ACT_AS_USER, owner_id=2)
    assert not is_authorized(USER, Action.ACT_AS_USER)


def test_admin_bypasses_every_check():
    for action in Action:
        assert is_authorized(ADMIN, action, owner_id=1)
        assert is_authorized(ADMIN, action)


def test_non_member_is_denied():
    for action in Action:
        if action == Action.ACT_AS_USER:
            continue
        assert not is_authorized(USER, action)
        # Someone else's membership row does not count
        assert not is_authorized(USER, action, membership=membership(ChatMemberType.OWNER, user_id=2))


@pytest.mark.parametrize("member_type,allowed", [
    (ChatMemberType.MEMBER, {Action.VIEW_CHAT, Action.POST_MESSAGE, Action.ADD_MEMBER}),
    (ChatMemberType.ADMIN, {
        Action.VIEW_CHAT, Action.POST_MESSAGE, Action.ADD_MEMBER,
        Action.EDIT_CHAT, Action.REMOVE_MEMBER, Action.CHANGE_MEMBER_ROLE,
    }),
    (ChatMemberType.OWNER, {
        Action.VIEW_CHAT, Action.POST_MESSAGE, Action.ADD_MEMBER,
        Action.EDIT_CHAT, Action.REMOVE_MEMBER, Action.CHANGE_MEMBER_ROLE,
        Action.DELETE_CHAT,
    }),
])
def test_chat_roles(member_type, allowed):
    member = membership(member_type)
    for action in Action:
        if action == Action.ACT_AS_USER:
            continue
        assert is_authorized(USER, action, membership=member) == (action in allowed), action


def test_authorize_raises_with_reason():
    with pytest.raises(AccessDeniedError) as exc_info:
        authorize(USER, Action.ACT_AS_USER, owner_id=2)
    assert exc_info.value.status_code == 403
    assert exc_info.value.message == "You can't act on behalf of another user"

    with pytest.raises(AccessDeniedError) as exc_info:
        authorize(USER, Action.VIEW_CHAT)
    assert exc_info.value.message == "User isn't chat member"

    with pytest.raises(AccessDeniedError) as exc_info:
        authorize(USER, Action.EDIT_CHAT, membership=membership(ChatMemberType.MEMBER))
    assert exc_info.value.message == "User hasn't chat admin permissions"

    with pytest.raises(AccessDeniedError) as exc_info:
        authorize(USER, Action.DELETE_CHAT, membership=membership(ChatMemberType.ADMIN))
    assert exc_info.value.message == "You are not chat Owner"

    authorize(USER, Action.DELETE_CHAT, membership=membership(ChatMemberType.OWNER))
