# backend/tandemboard/schemas/pilots.py

from typing import Literal

from pydantic import BaseModel, Field


class PilotCreate(BaseModel):
    display_name: str = Field(min_length=1)
    role: Literal["pilot", "staff"] = "pilot"

    model_config = {"from_attributes": True}


class PilotRead(BaseModel):
    id: int
    display_name: str
    role: str
    created_at: str

    model_config = {"from_attributes": True}
