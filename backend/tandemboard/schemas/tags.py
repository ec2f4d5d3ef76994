# backend/tandemboard/schemas/tags.py

import re

from pydantic import BaseModel, Field, field_validator


class TagCreate(BaseModel):
    name: str = Field(min_length=1)
    color: str

    model_config = {"from_attributes": True}

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        if not re.match(r"^#[0-9a-fA-F]{6}$", v):
            raise ValueError("Color must be in #RRGGBB format")
        return v.lower()


class TagRead(BaseModel):
    id: int
    name: str
    color: str

    model_config = {"from_attributes": True}
