from typing import Optional, Union


class ScimBridgeError(Exception):
    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class ConfigurationError(ScimBridgeError):
    """Missing or malformed provider configuration."""


class TransportError(ScimBridgeError):
    """The request could not be dispatched or no response came back."""


class ParseError(ScimBridgeError):
    """A response body did not match the expected SCIM resource shape."""


class UnexpectedStatusError(ScimBridgeError):
    def __init__(
        self,
        status: int,
        detail: Optional[str] = None,
        scim_type: Optional[str] = None,
    ):
        self.status = status
        self.scim_type = scim_type
        super().__init__(detail or f"Unexpected SCIM response status: {status}")


class NotFoundError(ScimBridgeError):
    def __init__(self, resource_type: str, identifier: Union[str, int]):
        self.resource_type = resource_type
        self.identifier = identifier
        super().__init__(f"{resource_type} with id '{identifier}' not found")


class InvalidAttributeValue(ScimBridgeError):
    def __init__(self, attribute: str, detail: str):
        self.attribute = attribute
        super().__init__(f"Invalid value for '{attribute}': {detail}")
