"""Single-attribute changes applied to a fetched User before it is written back.

The host identifies the attribute by name (``firstName``, ``lastName``,
``email``, ``userName``). Each name maps to one variant of :data:`UpdateField`.
"""
from typing import Annotated, Literal, Optional, Sequence, Union
from pydantic import BaseModel, Field, TypeAdapter, field_validator
from .base import Name
from .user import Email, User


class SetGivenName(BaseModel):
    attribute: Literal["firstName"] = "firstName"
    value: str

    def apply(self, user: User) -> None:
        if user.name is None:
            user.name = Name()
        user.name.given_name = self.value


class SetFamilyName(BaseModel):
    attribute: Literal["lastName"] = "lastName"
    value: str

    def apply(self, user: User) -> None:
        if user.name is None:
            user.name = Name()
        user.name.family_name = self.value


class SetEmail(BaseModel):
    attribute: Literal["email"] = "email"
    value: str

    def apply(self, user: User) -> None:
        # Replaces every existing address
        user.emails = [Email(value=self.value)]


class SetUserName(BaseModel):
    attribute: Literal["userName"] = "userName"
    value: str

    @field_validator("value")
    def validate_username(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("userName cannot be empty")
        return v

    def apply(self, user: User) -> None:
        user.user_name = self.value


UpdateField = Annotated[
    Union[SetGivenName, SetFamilyName, SetEmail, SetUserName],
    Field(discriminator="attribute"),
]

UPDATE_ATTRIBUTES = ("firstName", "lastName", "email", "userName")

_update_field_adapter = TypeAdapter(UpdateField)


def parse_update_field(attribute_name: str, values: Sequence[str]) -> Optional[UpdateField]:
    """Build the change for ``attribute_name`` from the first of ``values``.

    Returns None when the attribute is not one we mirror or no value was
    given. Raises ``pydantic.ValidationError`` for a rejected value.
    """
    if attribute_name not in UPDATE_ATTRIBUTES or not values:
        return None
    return _update_field_adapter.validate_python({"attribute": attribute_name, "value": values[0]})
