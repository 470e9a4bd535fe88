"""HTTP session for one remote SCIM directory.

A :class:`ScimSession` holds a single ``httpx.Client`` configured with HTTP
Basic credentials and the directory's base URL, and exposes one generic
:meth:`ScimSession.send` used by the resource adapter.

Responses are returned *unread* (``stream=True``). The caller owns them and
must close them, typically::

    with closing(session.send("Users/123", HttpMethod.GET)) as response:
        response.read()
        ...
"""
from enum import Enum
from typing import Any, Mapping, Optional, Union
import httpx
from pydantic import BaseModel
from scim_bridge.config import ProviderConfig
from scim_bridge.exceptions import TransportError
from scim_bridge.utils import get_logger

logger = get_logger(__name__)

SCIM_CONTENT_TYPE = "application/scim+json"


class HttpMethod(str, Enum):
    GET = "GET"
    DELETE = "DELETE"
    POST = "POST"
    PUT = "PUT"


_BODY_METHODS = (HttpMethod.POST, HttpMethod.PUT)


class ScimSession:
    """Long-lived authenticated HTTP client for a SCIM server.

    Not synchronized: share one session between sequential calls from a
    single caller, not between threads.

    Args:
        config:     Validated connection settings
        transport:  Optional httpx transport, e.g. ``httpx.MockTransport`` in tests
    """

    def __init__(self, config: ProviderConfig, transport: Optional[httpx.BaseTransport] = None):
        self.config = config
        self.base_url = config.scimurl
        self._client = httpx.Client(
            auth=httpx.BasicAuth(config.loginusername, config.loginpassword.get_secret_value()),
            headers={
                "Accept": SCIM_CONTENT_TYPE,
                "Content-Type": SCIM_CONTENT_TYPE,
            },
            timeout=config.request_timeout,
            verify=config.verify_tls,
            transport=transport,
        )

    @classmethod
    def from_config(
        cls,
        config: Union[ProviderConfig, Mapping[str, Any]],
        transport: Optional[httpx.BaseTransport] = None,
    ) -> "ScimSession":
        """Build a session, raising ``ConfigurationError`` for bad settings."""
        if not isinstance(config, ProviderConfig):
            config = ProviderConfig.from_component_config(config)
        return cls(config, transport=transport)

    def url_for(self, endpoint: str) -> str:
        return f"{self.base_url}/{endpoint}"

    def send(self, endpoint: str, method: Union[HttpMethod, str], body: Any = None) -> Optional[httpx.Response]:
        """Dispatch one request and hand back the unread response.

        Unknown methods are logged and skipped (returns None). Dispatch
        failures raise ``TransportError``; nothing is retried.
        """
        url = self.url_for(endpoint)

        try:
            http_method = HttpMethod(method)
        except ValueError:
            logger.warning(f"Unknown HTTP method {method!r}, skipping request to {url}")
            return None

        logger.info(f"Sending {http_method.value} request to {url}")

        try:
            payload = None
            if http_method in _BODY_METHODS and body is not None:
                payload = _serialize(body)

            request = self._client.build_request(http_method.value, url, json=payload)
            return self._client.send(request, stream=True)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(f"{http_method.value} {url} failed: {e}") from e
        except (TypeError, ValueError) as e:
            raise TransportError(f"Could not serialize {http_method.value} body for {url}: {e}") from e

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ScimSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def _serialize(body: Any) -> Any:
    if isinstance(body, BaseModel):
        return body.model_dump(mode="json", by_alias=True, exclude_none=True)
    return body
