import copy
import logging
import httpx
import pytest
from scim_bridge.exceptions import ConfigurationError, TransportError
from scim_bridge.provider import (
    SCIM_ID_ATTRIBUTE,
    ScimUserDelegate,
    ScimUserStorageProvider,
    ScimUserStorageProviderFactory,
)
from conftest import USERS_PATH


class FakeLocalUser:
    def __init__(self, username):
        self.username = username
        self.attributes = {}
        self.federation_link = None

    def get_first_attribute(self, name):
        values = self.attributes.get(name)
        return values[0] if values else None

    def set_single_attribute(self, name, value):
        self.attributes[name] = [value]

    def set_attribute(self, name, values):
        self.attributes[name] = list(values)

    def set_federation_link(self, link):
        self.federation_link = link


class FakeUserStorage:
    def __init__(self):
        self.users = {}

    def add_user(self, username):
        user = FakeLocalUser(username)
        self.users[username] = user
        return user


@pytest.fixture
def storage():
    return FakeUserStorage()


@pytest.fixture
def provider(client, storage):
    return ScimUserStorageProvider(client, storage, component_id="scim-component-1")


class TestAddUser:

    def test_links_local_user_to_remote_id(self, provider, storage, scim_server):
        scim_server.override("POST", USERS_PATH, 201, {"id": "123", "userName": "alice", "active": True})

        user = provider.add_user("alice")

        assert isinstance(user, ScimUserDelegate)
        assert user.scim_id == "123"
        local = storage.users["alice"]
        assert local.get_first_attribute(SCIM_ID_ATTRIBUTE) == "123"
        assert local.federation_link == "scim-component-1"
        assert user.username == "alice"

    def test_conflict_creates_no_local_user(self, provider, storage, scim_server, caplog):
        scim_server.override("POST", USERS_PATH, 409, {"detail": "User already exists"})

        with caplog.at_level(logging.WARNING, logger="scim_bridge"):
            assert provider.add_user("alice") is None

        assert storage.users == {}
        assert "User already exists" in caplog.text

    def test_200_is_not_a_successful_create(self, provider, storage, scim_server):
        scim_server.override("POST", USERS_PATH, 200, {"id": "123", "userName": "alice"})
        assert provider.add_user("alice") is None
        assert storage.users == {}

    def test_transport_failure_propagates(self, provider_config, storage):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        factory = ScimUserStorageProviderFactory()
        provider = factory.create(storage, "c1", {
            "scimurl": provider_config.scimurl,
            "loginusername": "admin",
            "loginpassword": "secret",
        }, transport=httpx.MockTransport(refuse))

        with pytest.raises(TransportError):
            provider.add_user("alice")
        assert storage.users == {}
        provider.close()


class TestRemoveUser:

    def test_remove_linked_user(self, provider, storage, scim_server):
        user = provider.add_user("alice")
        scim_id = user.scim_id

        assert provider.remove_user(storage.users["alice"]) is True
        assert scim_id not in scim_server.users

    def test_remote_failure_returns_false(self, provider, scim_server):
        local = FakeLocalUser("ghost")
        local.set_single_attribute(SCIM_ID_ATTRIBUTE, "does-not-exist")
        assert provider.remove_user(local) is False
        assert scim_server.requests[-1].method == "DELETE"

    def test_unlinked_user_sends_nothing(self, provider, scim_server):
        assert provider.remove_user(FakeLocalUser("local-only")) is False
        assert scim_server.requests == []


class TestUserDelegate:

    def test_setters_mirror_to_scim_and_local(self, provider, storage, scim_server):
        user = provider.add_user("alice")

        assert user.set_first_name("Alice") is True
        assert user.set_last_name("Liddell") is True
        assert user.set_email("alice@example.com") is True

        remote = scim_server.users[user.scim_id]
        assert remote["name"] == {"givenName": "Alice", "familyName": "Liddell"}
        assert remote["emails"] == [{"value": "alice@example.com"}]

        local = storage.users["alice"]
        assert local.get_first_attribute("firstName") == "Alice"
        assert local.get_first_attribute("email") == "alice@example.com"

    def test_failed_remote_update_skips_local_write(self, provider, storage, scim_server):
        user = provider.add_user("alice")
        scim_server.override("PUT", f"{USERS_PATH}/{user.scim_id}", 500, {"detail": "read only"})

        assert user.set_username("alice2") is False
        assert storage.users["alice"].get_first_attribute("userName") is None

    def test_unknown_attribute_still_stored_locally(self, provider, storage):
        user = provider.add_user("alice")
        assert user.set_attribute("department", ["R&D"]) is True
        assert storage.users["alice"].get_first_attribute("department") == "R&D"

    def test_reads_go_to_local_user(self, provider):
        user = provider.add_user("alice")
        assert user.username == "alice"
        assert user.federation_link == "scim-component-1"

    def test_copy_shares_local_user_and_client(self, provider, storage):
        user = provider.add_user("alice")
        clone = copy.copy(user)
        assert clone.local_user is storage.users["alice"]
        assert clone.scim_id == user.scim_id

    def test_uninitialized_delegate_raises_attribute_error(self):
        blank = ScimUserDelegate.__new__(ScimUserDelegate)
        with pytest.raises(AttributeError):
            blank.username
        with pytest.raises(AttributeError):
            blank._local_user


class TestFactory:

    def test_config_properties(self):
        factory = ScimUserStorageProviderFactory()
        assert factory.provider_id == "scim"
        names = [prop.name for prop in factory.config_properties]
        assert names == ["scimurl", "loginusername", "loginpassword"]
        assert [prop.secret for prop in factory.config_properties] == [False, False, True]

    def test_invalid_configuration(self, storage):
        factory = ScimUserStorageProviderFactory()
        with pytest.raises(ConfigurationError):
            factory.create(storage, "c1", {"scimurl": "not a url", "loginusername": "a", "loginpassword": "b"})

    def test_create_builds_working_provider(self, storage, scim_server, component_config):
        factory = ScimUserStorageProviderFactory()
        provider = factory.create(storage, "c1", component_config, transport=httpx.MockTransport(scim_server.handler))

        user = provider.add_user("bob")
        assert user is not None
        assert storage.users["bob"].federation_link == "c1"
        provider.close()
