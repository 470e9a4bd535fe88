from .base import (
    BaseResource,
    Meta,
    MultiValuedAttribute,
    Name,
    SCIMSchemaUri,
)
from .user import (
    User,
    Email,
    ListResponse,
)
from .error import (
    ErrorResponse,
)
from .update import (
    SetGivenName,
    SetFamilyName,
    SetEmail,
    SetUserName,
    UpdateField,
    UPDATE_ATTRIBUTES,
    parse_update_field,
)

__all__ = [
    # Base
    "BaseResource",
    "Meta",
    "MultiValuedAttribute",
    "Name",
    "SCIMSchemaUri",
    # User
    "User",
    "Email",
    "ListResponse",
    # Error
    "ErrorResponse",
    # Update
    "SetGivenName",
    "SetFamilyName",
    "SetEmail",
    "SetUserName",
    "UpdateField",
    "UPDATE_ATTRIBUTES",
    "parse_update_field",
]
