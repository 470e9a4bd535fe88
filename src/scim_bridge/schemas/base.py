from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict
from enum import Enum


class SCIMSchemaUri(str, Enum):
    USER = "urn:ietf:params:scim:schemas:core:2.0:User"
    ENTERPRISE_USER = "urn:ietf:params:scim:schemas:extension:enterprise:2.0:User"
    LIST_RESPONSE = "urn:ietf:params:scim:api:messages:2.0:ListResponse"
    ERROR = "urn:ietf:params:scim:api:messages:2.0:Error"


class Meta(BaseModel):
    # Timestamps stay strings so a PUT echoes them back untouched
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    resource_type: Optional[str] = Field(None, alias="resourceType")
    created: Optional[str] = None
    last_modified: Optional[str] = Field(None, alias="lastModified")
    location: Optional[str] = None
    version: Optional[str] = None


class MultiValuedAttribute(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    value: Optional[str] = None
    display: Optional[str] = None
    type: Optional[str] = None
    primary: Optional[bool] = None


class Name(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    formatted: Optional[str] = None
    family_name: Optional[str] = Field(None, alias="familyName")
    given_name: Optional[str] = Field(None, alias="givenName")
    middle_name: Optional[str] = Field(None, alias="middleName")
    honorific_prefix: Optional[str] = Field(None, alias="honorificPrefix")
    honorific_suffix: Optional[str] = Field(None, alias="honorificSuffix")


class BaseResource(BaseModel):
    """Common SCIM resource attributes.

    Attributes this package does not model are preserved, since updates
    replace the whole remote resource.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    schemas: List[str]
    id: Optional[str] = None
    external_id: Optional[str] = Field(None, alias="externalId")
    meta: Optional[Meta] = None

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
