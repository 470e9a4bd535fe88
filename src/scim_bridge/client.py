import json
from contextlib import closing
from typing import Optional, Protocol, Sequence, Type, TypeVar
from urllib.parse import quote
import httpx
from pydantic import BaseModel, ValidationError
from scim_bridge.exceptions import (
    InvalidAttributeValue,
    NotFoundError,
    ParseError,
    TransportError,
    UnexpectedStatusError,
)
from scim_bridge.schemas import ErrorResponse, ListResponse, User, parse_update_field
from scim_bridge.transport import HttpMethod, ScimSession
from scim_bridge.utils import get_logger

logger = get_logger(__name__)

USERS_ENDPOINT = "Users"

ModelT = TypeVar("ModelT", bound=BaseModel)


def user_endpoint(remote_id: str) -> str:
    return f"{USERS_ENDPOINT}/{quote(str(remote_id), safe='')}"


def _read_json(response: httpx.Response):
    body = response.read()
    if not body:
        raise ParseError(f"Empty response body (HTTP {response.status_code})")
    try:
        return json.loads(body)
    except ValueError as e:
        raise ParseError(f"Response body is not JSON (HTTP {response.status_code}): {e}") from e


def _parse(response: httpx.Response, model: Type[ModelT]) -> ModelT:
    data = _read_json(response)
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ParseError(f"Response body is not a valid {model.__name__}: {e}") from e


def parse_user(response: httpx.Response) -> User:
    """Parse a single User resource from a response body."""
    return _parse(response, User)


def parse_list_response(response: httpx.Response) -> ListResponse:
    """Parse a ListResponse (search result) from a response body."""
    return _parse(response, ListResponse)


def parse_error(response: httpx.Response) -> ErrorResponse:
    """Parse a SCIM Error resource, falling back to the raw body text.

    Used for diagnostics on failed calls, so it never raises.
    """
    text = response.read().decode("utf-8", errors="replace")
    try:
        return ErrorResponse.model_validate(json.loads(text))
    except (ValueError, ValidationError):
        return ErrorResponse(status=response.status_code, detail=text or None)


class UserDirectoryClient(Protocol):
    """Operations the host-facing provider needs from a remote user directory."""

    def create_user(self, user_name: str) -> httpx.Response: ...

    def delete_user(self, remote_id: str) -> httpx.Response: ...

    def get_user_by_id(self, remote_id: str) -> User: ...

    def update_user(self, remote_id: str, attribute_name: str, values: Sequence[str]) -> httpx.Response: ...


class ScimClient:
    """Maps user lifecycle operations onto SCIM ``/Users`` requests.

    ``create_user``, ``delete_user`` and ``update_user`` return the raw,
    unread response so the caller decides how to interpret the status code
    (201, 204 and 200 respectively on success). The caller must close it.
    """

    def __init__(self, session: ScimSession):
        self.session = session

    def _dispatch(self, endpoint: str, method: HttpMethod, body=None) -> httpx.Response:
        try:
            response = self.session.send(endpoint, method, body)
        except TransportError as e:
            logger.error(f"Error: {e.detail}")
            raise

        if response is None:
            raise TransportError(f"No response for {method.value} {endpoint}")
        return response

    def create_user(self, user_name: str) -> httpx.Response:
        new_user = User.new(user_name)
        return self._dispatch(USERS_ENDPOINT, HttpMethod.POST, new_user)

    def delete_user(self, remote_id: str) -> httpx.Response:
        return self._dispatch(user_endpoint(remote_id), HttpMethod.DELETE)

    def get_user_by_id(self, remote_id: str) -> User:
        response = self._dispatch(user_endpoint(remote_id), HttpMethod.GET)
        with closing(response):
            if response.status_code == 404:
                raise NotFoundError("User", remote_id)
            if response.status_code != 200:
                error = parse_error(response)
                raise UnexpectedStatusError(response.status_code, error.detail, error.scim_type)
            return parse_user(response)

    def update_user(self, remote_id: str, attribute_name: str, values: Sequence[str]) -> httpx.Response:
        """Replace one attribute on the remote user.

        Fetches the full resource, changes a single field and PUTs the whole
        resource back. Only ``values[0]`` is used. Unknown attribute names
        are logged and the resource is written back unchanged. A concurrent
        change between the GET and the PUT is overwritten.
        """
        logger.info(f"Updating {attribute_name} attribute for {remote_id}")

        try:
            change = parse_update_field(attribute_name, values)
        except ValidationError as e:
            raise InvalidAttributeValue(attribute_name, e.errors()[0]["msg"]) from e

        user = self.get_user_by_id(remote_id)

        if change is None:
            logger.info(f"Unknown user attribute to set: {attribute_name}")
        else:
            change.apply(user)

        return self._dispatch(user_endpoint(user.id or remote_id), HttpMethod.PUT, user)

    # -- ListResponse accessors ----------------------------------------------

    @staticmethod
    def _first_resource(users: ListResponse) -> User:
        if not users.resources:
            raise NotFoundError("User", "<empty result set>")
        return users.resources[0]

    def get_active(self, users: ListResponse) -> bool:
        return bool(self._first_resource(users).active)

    def get_email(self, users: ListResponse) -> Optional[str]:
        return self._first_resource(users).primary_email

    def get_first_name(self, users: ListResponse) -> Optional[str]:
        name = self._first_resource(users).name
        return name.given_name if name else None

    def get_last_name(self, users: ListResponse) -> Optional[str]:
        name = self._first_resource(users).name
        return name.family_name if name else None

    def get_user_name(self, users: ListResponse) -> str:
        return self._first_resource(users).user_name

    def get_id(self, users: ListResponse) -> Optional[str]:
        return self._first_resource(users).id

    def close(self) -> None:
        self.session.close()
