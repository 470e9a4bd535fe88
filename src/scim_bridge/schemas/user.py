from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator
from .base import (
    BaseResource,
    MultiValuedAttribute,
    Name,
    SCIMSchemaUri,
)


class Email(MultiValuedAttribute):
    pass


class User(BaseResource):
    schemas: List[str] = Field(default_factory=lambda: [SCIMSchemaUri.USER.value])
    user_name: str = Field(..., alias="userName")
    active: Optional[bool] = None
    name: Optional[Name] = None
    display_name: Optional[str] = Field(None, alias="displayName")
    emails: Optional[List[Email]] = None

    @field_validator("user_name")
    def validate_username(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("userName cannot be empty")
        return v

    @classmethod
    def new(cls, user_name: str) -> "User":
        """Minimal resource for a create request; the server assigns ``id``."""
        return cls(
            schemas=[SCIMSchemaUri.USER.value],
            user_name=user_name,
            active=True,
        )

    @property
    def primary_email(self) -> Optional[str]:
        if not self.emails:
            return None
        return self.emails[0].value


class ListResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    schemas: List[str] = [SCIMSchemaUri.LIST_RESPONSE.value]
    total_results: int = Field(0, alias="totalResults")
    resources: List[User] = Field(default_factory=list, alias="Resources")
    start_index: Optional[int] = Field(None, alias="startIndex")
    items_per_page: Optional[int] = Field(None, alias="itemsPerPage")
