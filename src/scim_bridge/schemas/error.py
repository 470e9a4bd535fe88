from typing import List, Optional, Union
from pydantic import BaseModel, Field, ConfigDict
from .base import SCIMSchemaUri


class ErrorResponse(BaseModel):
    # RFC 7644 sends status as a string, some servers send an int
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    schemas: List[str] = [SCIMSchemaUri.ERROR.value]
    detail: Optional[str] = None
    status: Optional[Union[int, str]] = None
    scim_type: Optional[str] = Field(None, alias="scimType")
