from pydantic import BaseModel, ConfigDict, field_validator
from typing import Optional
from datetime import datetime

class SettingPayload(BaseModel):
    """
    Body of create and update requests. Every field defaults to its zero value,
    and an explicit JSON null binds as that zero value too, so the controllers
    can report each missing field with its own message.
    """
    id: int = 0
    key: str = ""
    value: str = ""
    ttl: int = 0

    @field_validator("id", "ttl", mode="before")
    @classmethod
    def null_as_zero(cls, v):
        return 0 if v is None else v

    @field_validator("key", "value", mode="before")
    @classmethod
    def null_as_empty(cls, v):
        return "" if v is None else v

    def echo(self) -> dict:
        """Only the fields the caller sent; the create response."""
        return self.model_dump(exclude_unset=True)

    def echo_all(self) -> dict:
        """Every field, zero values included; the update response."""
        return self.model_dump()

class SettingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    key: str
    value: str
    ttl: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
