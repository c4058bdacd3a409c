from datetime import timedelta

import pytest

from expat_hub.models.user_account import UserAccount, UserStatus, utcnow
from expat_hub.services.errors import ConflictError, NotFoundError, ValidationError


def _register(auth_service, email, first_name="Jo", **profile):
    user, session = auth_service.register(
        first_name=first_name,
        last_name="Do",
        email=email,
        password="password1",
        **profile,
    )
    return user, session


def test_activate_then_login(auth_service, admin_service):
    user, _ = _register(auth_service, "jo@x.com")
    assert user.status == UserStatus.PENDING.value

    activated = admin_service.apply_action(user.id, "activate")
    assert activated.status == UserStatus.ACTIVE.value

    logged_in, _ = auth_service.login("jo@x.com", "password1")
    assert logged_in.id == user.id


def test_suspend_and_reactivate(auth_service, admin_service):
    user, _ = _register(auth_service, "jo@x.com")

    with pytest.raises(ConflictError):
        admin_service.apply_action(user.id, "suspend")

    admin_service.apply_action(user.id, "activate")
    assert admin_service.apply_action(user.id, "suspend").status == UserStatus.SUSPENDED.value
    assert admin_service.apply_action(user.id, "activate").status == UserStatus.ACTIVE.value


@pytest.mark.parametrize("start", ["pending", "active", "suspended"])
def test_ban_is_terminal(auth_service, admin_service, database, start):
    user, _ = _register(auth_service, "jo@x.com")
    with database.get_session() as session:
        row = session.get(UserAccount, user.id)
        row.status = start
        session.add(row)
        session.commit()

    assert admin_service.apply_action(user.id, "ban").status == UserStatus.BANNED.value
    assert admin_service.apply_action(user.id, "ban").status == UserStatus.BANNED.value
    for action in ("activate", "suspend"):
        with pytest.raises(ConflictError):
            admin_service.apply_action(user.id, action)


def test_role_and_verify_actions(auth_service, admin_service):
    user, _ = _register(auth_service, "jo@x.com")

    assert admin_service.apply_action(user.id, "makeModerator").role == "moderator"
    assert admin_service.apply_action(user.id, "makeAdmin").role == "admin"
    assert admin_service.apply_action(user.id, "makeMember").role == "member"

    verified = admin_service.apply_action(user.id, "verify")
    assert verified.email_verified is True
    assert verified.status == UserStatus.PENDING.value


def test_unknown_action_and_user(auth_service, admin_service):
    user, _ = _register(auth_service, "jo@x.com")
    with pytest.raises(ValidationError):
        admin_service.apply_action(user.id, "delete")
    with pytest.raises(NotFoundError):
        admin_service.apply_action(9999, "activate")


def test_reset_password_revokes_all_sessions(auth_service, admin_service, sessions):
    user, first = _register(auth_service, "jo@x.com")
    _, second = auth_service.login("jo@x.com", "password1")

    admin_service.reset_password(user.id, "brand-new-pass")

    assert sessions.lookup(first.token) is None
    assert sessions.lookup(second.token) is None
    assert auth_service.login("jo@x.com", "brand-new-pass")[0].id == user.id

    with pytest.raises(ValidationError):
        admin_service.reset_password(user.id, "short")
    with pytest.raises(NotFoundError):
        admin_service.reset_password(9999, "long-enough")


def test_list_users_search_and_filter(auth_service, admin_service):
    alice, _ = _register(auth_service, "alice@x.com", first_name="Alice")
    bob, _ = _register(auth_service, "bob@y.com", first_name="Bob")
    admin_service.apply_action(bob.id, "activate")

    assert [u.id for u in admin_service.list_users()] == [bob.id, alice.id]
    assert [u.id for u in admin_service.list_users(search="ALI")] == [alice.id]
    assert [u.id for u in admin_service.list_users(search="y.com")] == [bob.id]
    assert [u.id for u in admin_service.list_users(status="active")] == [bob.id]
    assert admin_service.list_users(search="alice", status="active") == []
    assert len(admin_service.list_users(limit=1)) == 1


def test_list_users_search_treats_wildcards_literally(auth_service, admin_service):
    plain, _ = _register(auth_service, "plain@x.com")
    underscored, _ = _register(auth_service, "under_score@x.com")

    assert admin_service.list_users(search="%") == []
    assert [u.id for u in admin_service.list_users(search="_")] == [underscored.id]
    assert admin_service.list_users(search="p%n") == []
    assert admin_service.list_users(search="\\") == []
    assert [u.id for u in admin_service.list_users(search="plain")] == [plain.id]


def test_stats(auth_service, admin_service, database):
    first, _ = _register(auth_service, "a@x.com", nationality="Indian")
    second, _ = _register(auth_service, "b@x.com", nationality="Indian")
    third, _ = _register(auth_service, "c@x.com", nationality="British")
    _register(auth_service, "d@x.com")
    admin_service.apply_action(first.id, "activate")
    admin_service.apply_action(second.id, "ban")

    with database.get_session() as session:
        old = session.get(UserAccount, third.id)
        old.created_at = utcnow() - timedelta(days=30)
        session.add(old)
        session.commit()

    stats = admin_service.stats()
    assert stats["total_users"] == 4
    assert stats["active_users"] == 1
    assert stats["pending_users"] == 2
    assert stats["banned_users"] == 1
    assert stats["suspended_users"] == 0
    assert stats["new_users_this_week"] == 3
    assert stats["users_by_nationality"] == [
        {"nationality": "Indian", "count": 2},
        {"nationality": "British", "count": 1},
    ]
