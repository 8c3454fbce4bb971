from pydantic import BaseModel, field_validator, ConfigDict
from datetime import datetime


class GenerateContentRequest(BaseModel):
    query: str


class ContentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    query: str
    content: str
    user_id: str
    created_at: datetime
    updated_at: datetime

    @field_validator("id", "user_id", mode="before")
    @classmethod
    def uuid_to_str(cls, v) -> str:
        return str(v)
