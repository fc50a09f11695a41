import pytest

from conftest import PASSWORD, principal_of
from ratemystore.auth.utils import ACCESS_TOKEN, REFRESH_TOKEN, decode_token, verify_password
from ratemystore.core.errors import ConflictError, ForbiddenError, UnauthenticatedError
from ratemystore.model.user import User, UserRole
from ratemystore.model.user_schema import AdminUserCreate, PasswordUpdate, UserCreate, UserLogin, UserUpdate
from ratemystore.service import identity


def _signup(email="jane@example.com", **overrides):
    data = {"name": "Jane Doe", "email": email, "address": "7 Elm Street", "password": PASSWORD}
    data.update(overrides)
    return UserCreate(**data)


def test_register_hashes_password_and_persists_refresh_token(db):
    result = identity.register_user(db, _signup(), UserRole.NORMAL_USER)

    user = db.query(User).filter(User.email == "jane@example.com").one()
    assert user.role == UserRole.NORMAL_USER
    assert user.password != PASSWORD
    assert verify_password(PASSWORD, user.password)
    assert user.refresh_token == result.refresh_token
    assert decode_token(result.access_token, ACCESS_TOKEN) == user.id
    assert decode_token(result.refresh_token, REFRESH_TOKEN) == user.id


def test_register_store_owner_forces_role(db):
    result = identity.register_user(db, _signup(), UserRole.STORE_OWNER)
    assert result.user.role == UserRole.STORE_OWNER


def test_register_duplicate_email_conflicts(db, make_user):
    make_user(email="taken@example.com")
    with pytest.raises(ConflictError):
        identity.register_user(db, _signup(email="taken@example.com"), UserRole.NORMAL_USER)


def test_tokens_are_not_interchangeable(db):
    result = identity.register_user(db, _signup(), UserRole.NORMAL_USER)
    with pytest.raises(UnauthenticatedError):
        decode_token(result.refresh_token, ACCESS_TOKEN)
    with pytest.raises(UnauthenticatedError):
        decode_token("not-a-token", ACCESS_TOKEN)


def test_admin_created_user_defaults_to_normal_user(db, make_user):
    admin = make_user(role=UserRole.SYSTEM_ADMIN)
    data = AdminUserCreate(name="New Person", email="new@example.com", address="", password=PASSWORD)
    user = identity.create_user(db, principal_of(admin), data)
    assert user.role == UserRole.NORMAL_USER
    assert user.refresh_token is None


def test_only_admin_creates_users(db, make_user):
    owner = make_user(role=UserRole.STORE_OWNER)
    data = AdminUserCreate(name="New Person", email="new@example.com", password=PASSWORD)
    with pytest.raises(ForbiddenError):
        identity.create_user(db, principal_of(owner), data)


def test_login_rotates_refresh_token(db, make_user):
    user = make_user(email="login@example.com")
    first = identity.login(db, UserLogin(email="login@example.com", password=PASSWORD))
    second = identity.login(db, UserLogin(email="login@example.com", password=PASSWORD))
    assert first.refresh_token != second.refresh_token
    db.refresh(user)
    assert user.refresh_token == second.refresh_token


def test_login_failures_are_indistinguishable(db, make_user):
    make_user(email="normal@example.com")
    attempts = [
        (UserLogin(email="nobody@example.com", password=PASSWORD), None),
        (UserLogin(email="normal@example.com", password="Wrong#123"), None),
        (UserLogin(email="normal@example.com", password=PASSWORD), UserRole.SYSTEM_ADMIN),
        (UserLogin(email="normal@example.com", password=PASSWORD), UserRole.STORE_OWNER),
    ]
    messages = set()
    for data, role in attempts:
        with pytest.raises(UnauthenticatedError) as excinfo:
            identity.login(db, data, required_role=role)
        messages.add(excinfo.value.message)
    assert messages == {"Invalid email or password"}


def test_scoped_login_accepts_matching_role(db, make_user):
    make_user(role=UserRole.SYSTEM_ADMIN, email="boss@example.com")
    result = identity.login(db, UserLogin(email="boss@example.com", password=PASSWORD), UserRole.SYSTEM_ADMIN)
    assert result.user.role == UserRole.SYSTEM_ADMIN


def test_refresh_requires_current_server_token(db, make_user):
    make_user(email="refresh@example.com")
    old = identity.login(db, UserLogin(email="refresh@example.com", password=PASSWORD))
    new = identity.refresh_session(db, old.refresh_token)
    assert new.refresh_token != old.refresh_token

    with pytest.raises(UnauthenticatedError):
        identity.refresh_session(db, old.refresh_token)
    with pytest.raises(UnauthenticatedError):
        identity.refresh_session(db, new.access_token)
    with pytest.raises(UnauthenticatedError):
        identity.refresh_session(db, None)


def test_logout_invalidates_refresh_token(db, make_user):
    user = make_user(email="bye@example.com")
    result = identity.login(db, UserLogin(email="bye@example.com", password=PASSWORD))
    identity.logout(db, principal_of(user))
    with pytest.raises(UnauthenticatedError):
        identity.refresh_session(db, result.refresh_token)


def test_update_profile_changes_only_given_fields(db, make_user):
    user = make_user(name="Old Name", address="Old Address")
    updated = identity.update_profile(db, principal_of(user), UserUpdate(address="New Address"))
    assert updated.name == "Old Name"
    assert updated.address == "New Address"


def test_update_profile_can_clear_address(db, make_user):
    user = make_user(address="1 Main Street")
    identity.update_profile(db, principal_of(user), UserUpdate(address=""))
    db.refresh(user)
    assert user.address == ""


def test_change_password_checks_current_password(db, make_user):
    user = make_user()
    with pytest.raises(UnauthenticatedError):
        identity.change_password(
            db, principal_of(user), PasswordUpdate(current_password="Wrong#123", new_password="Better#456"),
        )

    identity.change_password(db, principal_of(user), PasswordUpdate(current_password=PASSWORD,
                                                                    new_password="Better#456"))
    db.refresh(user)
    assert verify_password("Better#456", user.password)
    assert user.refresh_token is None


@pytest.mark.parametrize("password", ["short#A", "alllowercase#1", "NoSpecial123", "Toolongpassword#12"])
def test_weak_passwords_rejected(password):
    with pytest.raises(ValueError):
        _signup(password=password)


def test_profile_requires_principal(db):
    with pytest.raises(UnauthenticatedError):
        identity.get_profile(db, None)


def test_owner_profile_is_owner_only(db, make_user):
    with pytest.raises(ForbiddenError):
        identity.get_owner_profile(db, principal_of(make_user()))
