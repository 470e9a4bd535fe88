"""Host-facing user storage provider backed by a remote SCIM directory.

The identity-provider host owns local user records; this module mirrors
their lifecycle to SCIM and links each local record to its remote resource
through the ``SCIM_ID`` correlation attribute.
"""
from contextlib import closing
from typing import Any, List, Mapping, Optional, Protocol, Sequence
from pydantic import BaseModel, Field, ConfigDict
from scim_bridge.client import ScimClient, UserDirectoryClient, parse_error, parse_user
from scim_bridge.config import ProviderConfig
from scim_bridge.exceptions import ParseError
from scim_bridge.transport import ScimSession
from scim_bridge.utils import get_logger

logger = get_logger(__name__)

SCIM_ID_ATTRIBUTE = "SCIM_ID"


class LocalUser(Protocol):
    """A user record in the host's own storage."""

    @property
    def username(self) -> str: ...

    def get_first_attribute(self, name: str) -> Optional[str]: ...

    def set_single_attribute(self, name: str, value: str) -> None: ...

    def set_attribute(self, name: str, values: List[str]) -> None: ...

    def set_federation_link(self, link: str) -> None: ...


class LocalUserStorage(Protocol):
    def add_user(self, username: str) -> LocalUser: ...


class ScimUserDelegate:
    """Wraps a local user and mirrors attribute writes to the SCIM directory.

    Reads and any other attribute access go straight to the wrapped user.
    """

    def __init__(self, local_user: LocalUser, client: UserDirectoryClient):
        self._local_user = local_user
        self._client = client

    @property
    def local_user(self) -> LocalUser:
        return self._local_user

    @property
    def scim_id(self) -> Optional[str]:
        return self._local_user.get_first_attribute(SCIM_ID_ATTRIBUTE)

    def set_attribute(self, name: str, values: Sequence[str]) -> bool:
        scim_id = self.scim_id
        if not scim_id:
            logger.warning(f"User {self._local_user.username} has no {SCIM_ID_ATTRIBUTE}, not updating SCIM")
            return False

        response = self._client.update_user(scim_id, name, values)
        with closing(response):
            if response.status_code != 200:
                error = parse_error(response)
                logger.warning(f"Unexpected update status code {response.status_code} for {scim_id}: {error.detail}")
                return False

        self._local_user.set_attribute(name, list(values))
        return True

    def set_single_attribute(self, name: str, value: str) -> bool:
        return self.set_attribute(name, [value])

    def set_first_name(self, value: str) -> bool:
        return self.set_single_attribute("firstName", value)

    def set_last_name(self, value: str) -> bool:
        return self.set_single_attribute("lastName", value)

    def set_email(self, value: str) -> bool:
        return self.set_single_attribute("email", value)

    def set_username(self, value: str) -> bool:
        return self.set_single_attribute("userName", value)

    def __getattr__(self, item: str) -> Any:
        # private names are never forwarded, so copy/unpickle do not recurse
        if item.startswith("_"):
            raise AttributeError(item)
        return getattr(self._local_user, item)


class ScimUserStorageProvider:
    def __init__(self, client: UserDirectoryClient, storage: LocalUserStorage, component_id: str):
        self.client = client
        self.storage = storage
        self.component_id = component_id

    def add_user(self, username: str) -> Optional[ScimUserDelegate]:
        """Create ``username`` remotely, then locally.

        Returns None when the directory does not answer 201 Created; no local
        record is created in that case.
        """
        response = self.client.create_user(username)

        with closing(response):
            if response.status_code != 201:
                error = parse_error(response)
                logger.warning(f"Unexpected create status code returned: {response.status_code}")
                logger.warning(f"{error.detail}")
                return None
            scim_user = parse_user(response)

        if not scim_user.id:
            raise ParseError(f"Created SCIM user {username} has no id")

        user = self.storage.add_user(username)
        user.set_single_attribute(SCIM_ID_ATTRIBUTE, scim_user.id)
        user.set_federation_link(self.component_id)

        logger.info(f"Created SCIM user {username} (SCIM id {scim_user.id})")
        return ScimUserDelegate(user, self.client)

    def remove_user(self, user: LocalUser) -> bool:
        logger.info(f"Removing user: {user.username}")

        scim_id = user.get_first_attribute(SCIM_ID_ATTRIBUTE)
        if not scim_id:
            logger.warning(f"User {user.username} has no {SCIM_ID_ATTRIBUTE}, nothing to delete")
            return False

        response = self.client.delete_user(scim_id)
        with closing(response):
            if response.status_code == 204:
                return True
            error = parse_error(response)
            logger.warning(f"Unexpected delete status code {response.status_code} for {scim_id}: {error.detail}")
            return False

    def close(self) -> None:
        close = getattr(self.client, "close", None)
        if close is not None:
            close()


class ConfigProperty(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    label: str
    help_text: str = Field("", alias="helpText")
    secret: bool = False


class ScimUserStorageProviderFactory:
    """Builds providers for the host from its component configuration."""

    provider_id = "scim"

    config_properties = [
        ConfigProperty(name="scimurl", label="SCIM Server URL", help_text="Base URL of the SCIM 2.0 endpoint"),
        ConfigProperty(name="loginusername", label="Login username", help_text="Username for HTTP Basic authentication"),
        ConfigProperty(name="loginpassword", label="Login password", help_text="Password for HTTP Basic authentication", secret=True),
    ]

    def validate_configuration(self, config: Mapping[str, Any]) -> ProviderConfig:
        return ProviderConfig.from_component_config(config)

    def create(
        self,
        storage: LocalUserStorage,
        component_id: str,
        config: Mapping[str, Any],
        transport=None,
    ) -> ScimUserStorageProvider:
        provider_config = self.validate_configuration(config)
        session = ScimSession(provider_config, transport=transport)
        return ScimUserStorageProvider(ScimClient(session), storage, component_id)
