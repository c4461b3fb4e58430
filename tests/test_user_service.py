"""UserService tests against a real in-memory SQLite session."""
import threading

import pytest

from conftest import years_ago
from users_api.core.errors import EmailConflictError, OperationCancelled, UserNotFoundError
from users_api.core.security import SCHEME, hash_password
from users_api.models.user import User
from users_api.schemas.user import UserCreate, UserUpdate


def _create(email="ana@mail.com", **overrides):
    data = {
        "name": "Ana Silva",
        "email": email,
        "password": "Abc123",
        "birth_date": years_ago(19),
    }
    data.update(overrides)
    return UserCreate(**data)


def _update(email="ana@mail.com", **overrides):
    data = {
        "name": "Ana Souza",
        "email": email,
        "birth_date": years_ago(19),
        "phone": "(11) 98765-4321",
        "active": True,
    }
    data.update(overrides)
    return UserUpdate(**data)


def test_create_then_get(service):
    created = service.create_user(_create())
    fetched = service.get_user(created.id)

    assert fetched == created
    assert fetched.active is True
    assert fetched.email == "ana@mail.com"
    assert "password" not in fetched.model_dump()
    assert "password_hash" not in fetched.model_dump()


def test_password_is_stored_hashed(service, session):
    created = service.create_user(_create())
    stored = session.get(User, created.id)

    assert stored.password_hash != "Abc123"
    assert stored.password_hash.startswith(f"{SCHEME}$1000$")


def test_hash_password_is_salted():
    first, second = hash_password("Abc123"), hash_password("Abc123")
    assert first != second
    assert first.split("$")[0] == second.split("$")[0] == SCHEME


def test_duplicate_email_differing_in_case_conflicts(service):
    service.create_user(_create(email="ana@mail.com"))
    with pytest.raises(EmailConflictError):
        service.create_user(_create(email="ANA@Mail.com"))
    assert len(service.list_users()) == 1


def test_unique_constraint_is_translated_to_conflict(service, monkeypatch):
    service.create_user(_create())
    # Simulate the check-then-act race: the pre-check misses the existing row.
    monkeypatch.setattr(service.repository, "email_exists", lambda email: False)

    with pytest.raises(EmailConflictError):
        service.create_user(_create())
    assert len(service.list_users()) == 1


def test_list_includes_inactive_users_ordered_by_id(service):
    first = service.create_user(_create(email="a@mail.com"))
    second = service.create_user(_create(email="b@mail.com"))
    service.delete_user(first.id)

    users = service.list_users()
    assert [u.id for u in users] == [first.id, second.id]
    assert [u.active for u in users] == [False, True]


def test_get_missing_user_returns_none(service):
    assert service.get_user(999) is None


def test_update_missing_user_raises_not_found(service):
    with pytest.raises(UserNotFoundError):
        service.update_user(999, _update())


def test_update_keeping_own_email_does_not_conflict(service, session):
    created = service.create_user(_create())
    updated = service.update_user(created.id, _update(email=created.email))

    assert updated.name == "Ana Souza"
    assert updated.phone == "(11) 98765-4321"
    stored = session.get(User, created.id)
    assert stored.updated_at is not None
    assert stored.updated_at >= stored.created_at


def test_update_to_email_of_other_user_conflicts(service):
    service.create_user(_create(email="a@mail.com"))
    second = service.create_user(_create(email="b@mail.com"))

    with pytest.raises(EmailConflictError):
        service.update_user(second.id, _update(email="a@mail.com"))
    assert service.get_user(second.id).email == "b@mail.com"


def test_update_does_not_touch_password(service, session):
    created = service.create_user(_create())
    before = session.get(User, created.id).password_hash

    service.update_user(created.id, _update())
    assert session.get(User, created.id).password_hash == before


def test_update_without_active_keeps_current_flag(service):
    created = service.create_user(_create())
    service.delete_user(created.id)

    updated = service.update_user(created.id, _update(active=None))
    assert updated.active is False


def test_delete_is_soft(service):
    created = service.create_user(_create())

    assert service.delete_user(created.id) is True
    fetched = service.get_user(created.id)
    assert fetched is not None
    assert fetched.active is False


def test_delete_missing_user_returns_false(service):
    assert service.delete_user(999) is False
    assert service.list_users() == []


def test_email_exists(service):
    service.create_user(_create())
    assert service.email_exists("ana@mail.com") is True
    assert service.email_exists(" ANA@mail.com") is True
    assert service.email_exists("other@mail.com") is False


def test_cancelled_create_commits_nothing(service):
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(OperationCancelled):
        service.create_user(_create(), cancel=cancel)
    assert service.list_users() == []


def test_cancelled_delete_leaves_user_active(service):
    created = service.create_user(_create())
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(OperationCancelled):
        service.delete_user(created.id, cancel=cancel)
    assert service.get_user(created.id).active is True


def test_create_stores_email_lowercased(service, session):
    created = service.create_user(_create(email="  Ana@Mail.com "))

    assert created.email == "ana@mail.com"
    assert session.get(User, created.id).email == "ana@mail.com"


def test_update_with_own_email_in_other_case_does_not_conflict(service):
    created = service.create_user(_create(email="ana@mail.com"))

    updated = service.update_user(created.id, _update(email="ANA@mail.com"))
    assert updated.email == "ana@mail.com"


def test_update_with_other_users_email_in_other_case_conflicts(service):
    service.create_user(_create(email="a@mail.com"))
    second = service.create_user(_create(email="b@mail.com"))

    with pytest.raises(EmailConflictError):
        service.update_user(second.id, _update(email=" A@Mail.com"))


def test_cancelled_update_keeps_stored_values(service):
    created = service.create_user(_create())
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(OperationCancelled):
        service.update_user(created.id, _update(email="new@mail.com"), cancel=cancel)
    fetched = service.get_user(created.id)
    assert fetched.email == "ana@mail.com"
    assert fetched.name == "Ana Silva"


def test_read_operations_honour_cancellation(service):
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(OperationCancelled):
        service.list_users(cancel=cancel)
    with pytest.raises(OperationCancelled):
        service.get_user(1, cancel=cancel)
    with pytest.raises(OperationCancelled):
        service.email_exists("ana@mail.com", cancel=cancel)


def test_hash_records_iteration_count():
    scheme, rounds, salt, digest = hash_password("Abc123", iterations=5000).split("$")
    assert (scheme, rounds) == (SCHEME, "5000")
    assert len(bytes.fromhex(salt)) == 16
    assert len(bytes.fromhex(digest)) == 32
