"""
Test: client local storage and session store against the running app.
"""
import json

import pytest
from conftest import API

from exameval.client.api import ApiClient, ApiError
from exameval.client.session import TOKEN_KEY, USER_KEY, AuthError, SessionStore
from exameval.client.storage import LocalStorage


@pytest.fixture
def storage(tmp_path):
    storage = LocalStorage(str(tmp_path / "client" / "storage.db"))
    yield storage
    storage.close()


@pytest.fixture
def api(client):
    return ApiClient(base_url=f"http://testserver{API}", http=client)


class TestLocalStorage:
    def test_set_get_remove(self, storage):
        assert storage.get_item("missing") is None
        assert storage.set_item("k", "v") is True
        assert storage.get_item("k") == "v"
        storage.set_item("k", "w")
        assert storage.get_item("k") == "w"
        storage.remove_item("k")
        assert storage.get_item("k") is None

    def test_survives_reopen(self, tmp_path):
        path = str(tmp_path / "store.db")
        first = LocalStorage(path)
        first.set_item("hello", "world")
        first.close()

        second = LocalStorage(path)
        assert second.get_item("hello") == "world"
        second.close()

    def test_in_memory(self):
        storage = LocalStorage(":memory:")
        storage.set_item("a", "1")
        assert storage.get_item("a") == "1"


class TestRestore:
    def test_nothing_persisted(self, api, storage):
        session = SessionStore(api, storage)
        assert session.restore() is None
        assert not session.is_authenticated

    def test_literal_undefined(self, api, storage):
        storage.set_item(USER_KEY, "undefined")
        session = SessionStore(api, storage)
        assert session.restore() is None

    def test_malformed_user_is_removed(self, api, storage):
        storage.set_item(USER_KEY, "{not json")
        session = SessionStore(api, storage)
        assert session.restore() is None
        assert storage.get_item(USER_KEY) is None

    def test_restores_persisted_session(self, api, storage):
        storage.set_item(USER_KEY, json.dumps({"id": 1, "name": "Ada"}))
        storage.set_item(TOKEN_KEY, "tok")
        session = SessionStore(api, storage)
        assert session.restore() == {"id": 1, "name": "Ada"}
        assert session.token == "tok"
        assert api.token == "tok"


class TestLoginLogout:
    def test_register_persists_session(self, client, api, storage):
        session = SessionStore(api, storage)
        user = session.register("Ada", "ada@example.com", "secret123", role="teacher")
        assert user["role"] == "teacher"
        assert json.loads(storage.get_item(USER_KEY))["email"] == "ada@example.com"
        assert storage.get_item(TOKEN_KEY) == session.token

        client.cookies.clear()
        me = api.get("/auth/me")
        assert me["data"]["email"] == "ada@example.com"

    def test_login_then_restore_elsewhere(self, api, storage, register_user):
        register_user("Ada", "ada@example.com")
        SessionStore(api, storage).login("ada@example.com", "secret123")

        restored = SessionStore(ApiClient(http=api.http, base_url=api.base_url), storage)
        assert restored.restore()["email"] == "ada@example.com"
        assert restored.token

    def test_failed_login_keeps_prior_session(self, api, storage, register_user):
        register_user("Ada", "ada@example.com")
        session = SessionStore(api, storage)
        session.login("ada@example.com", "secret123")
        token = session.token

        with pytest.raises(AuthError) as excinfo:
            session.login("ada@example.com", "wrong-password")
        assert excinfo.value.message == "Invalid credentials"
        assert excinfo.value.status_code == 401
        assert session.current_user["email"] == "ada@example.com"
        assert storage.get_item(TOKEN_KEY) == token

    def test_failed_register(self, api, storage, register_user):
        register_user("Ada", "ada@example.com")
        with pytest.raises(AuthError) as excinfo:
            SessionStore(api, storage).register("Ada", "ada@example.com", "secret123")
        assert excinfo.value.message == "User already exists with this email"

    def test_logout_clears_everything(self, api, storage, register_user):
        register_user("Ada", "ada@example.com")
        session = SessionStore(api, storage)
        session.login("ada@example.com", "secret123")
        session.logout()

        assert not session.is_authenticated
        assert storage.get_item(USER_KEY) is None
        assert storage.get_item(TOKEN_KEY) is None
        assert SessionStore(api, storage).restore() is None


class TestApiClient:
    def test_error_carries_server_message(self, client, api):
        client.cookies.clear()
        with pytest.raises(ApiError) as excinfo:
            api.get("/auth/me")
        assert excinfo.value.status_code == 401
        assert excinfo.value.message == "Not authorized to access this route"
