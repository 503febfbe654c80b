from datetime import datetime, timezone

import psycopg2.errors
import pytest

from backend.auth_service.models import User
from backend.auth_service.passwords import PasswordHashingError
from backend.auth_service.store import UserAlreadyExistsError, UserStore

NOW = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def stored_row(**overrides):
    row = {
        "user_id": 1,
        "email": "a@x.com",
        "password": "$argon2id$v=19$m=8,t=1,p=1$c2FsdHNhbHQ$aGFzaGhhc2g",
        "is_verified": False,
        "last_login": None,
        "created_at": NOW,
        "updated_at": NOW,
    }
    row.update(overrides)
    return row


def test_new_user_tracks_no_modifications():
    user = User(email="  a@x.com ", password="secret")
    assert user.email == "a@x.com"
    assert user.is_new
    assert not user.is_modified("password")

    user.password = "other"
    assert user.is_modified("password")


def test_loaded_user_is_clean():
    user = User.from_row(stored_row())
    assert not user.is_new
    assert not user.is_modified("password")
    assert not user.is_modified("email")


def test_find_by_email(mock_db, passwords):
    db, cursor = mock_db
    cursor.fetchone.return_value = stored_row()

    user = UserStore(db, passwords).find_by_email("a@x.com")

    assert user.user_id == 1
    assert user.email == "a@x.com"
    args, _ = cursor.execute.call_args
    assert "WHERE email = %s" in args[0]
    assert args[1] == ("a@x.com",)


def test_find_by_email_missing(mock_db, passwords):
    db, cursor = mock_db
    cursor.fetchone.return_value = None

    assert UserStore(db, passwords).find_by_email("nobody@x.com") is None


def test_save_new_user_hashes_password(mock_db, passwords):
    db, cursor = mock_db
    cursor.fetchone.side_effect = lambda: stored_row(password=cursor.execute.call_args[0][1][1])

    user = UserStore(db, passwords).save(User(email="a@x.com", password="secret"))

    args, _ = cursor.execute.call_args
    assert args[0].strip().startswith("INSERT INTO users")
    written_password = args[1][1]
    assert written_password != "secret"
    assert passwords.verify(written_password, "secret")
    assert user.password == written_password
    assert user.user_id == 1
    assert not user.is_modified("password")


def test_resave_without_password_change_keeps_hash(mock_db, passwords, mocker):
    db, cursor = mock_db
    original = passwords.hash("secret")
    cursor.fetchone.return_value = stored_row(password=original)
    hash_spy = mocker.spy(passwords, "hash")

    store = UserStore(db, passwords)
    user = User.from_row(stored_row(password=original))
    user.is_verified = False
    store.save(user)
    store.save(user)

    hash_spy.assert_not_called()
    args, _ = cursor.execute.call_args
    assert args[0].strip().startswith("UPDATE users")
    assert args[1][1] == original
    assert user.password == original


def test_resave_with_new_password_rehashes(mock_db, passwords):
    db, cursor = mock_db
    cursor.fetchone.side_effect = lambda: stored_row(password=cursor.execute.call_args[0][1][1])

    user = User.from_row(stored_row(password=passwords.hash("secret")))
    user.password = "changed"
    UserStore(db, passwords).save(user)

    written_password = cursor.execute.call_args[0][1][1]
    assert passwords.verify(written_password, "changed")


def test_hashing_failure_writes_nothing(mock_db, passwords, mocker):
    db, cursor = mock_db
    mocker.patch.object(passwords, "hash", side_effect=PasswordHashingError("boom"))

    user = User(email="a@x.com", password="secret")
    with pytest.raises(PasswordHashingError):
        UserStore(db, passwords).save(user)

    cursor.execute.assert_not_called()
    assert user.password == "secret"


def test_retry_after_failed_insert_hashes_plaintext_once(mock_db, passwords):
    db, cursor = mock_db
    cursor.execute.side_effect = [psycopg2.OperationalError("connection lost"), None]
    cursor.fetchone.side_effect = lambda: stored_row(password=cursor.execute.call_args[0][1][1])

    store = UserStore(db, passwords)
    user = User(email="a@x.com", password="secret")
    with pytest.raises(psycopg2.OperationalError):
        store.save(user)

    assert user.password == "secret"
    assert user.is_new

    store.save(user)

    written_password = cursor.execute.call_args[0][1][1]
    assert passwords.verify(written_password, "secret")
    assert user.password == written_password


def test_unique_violation_becomes_already_exists(mock_db, passwords):
    db, cursor = mock_db
    cursor.execute.side_effect = psycopg2.errors.UniqueViolation("duplicate key")

    with pytest.raises(UserAlreadyExistsError):
        UserStore(db, passwords).save(User(email="a@x.com", password="secret"))


def test_to_dict_returns_full_record():
    data = User.from_row(stored_row()).to_dict()
    assert data == {
        "_id": 1,
        "email": "a@x.com",
        "password": stored_row()["password"],
        "isVerified": False,
        "lastLogin": None,
        "created_at": NOW.isoformat(),
        "updatedAt": NOW.isoformat(),
    }
