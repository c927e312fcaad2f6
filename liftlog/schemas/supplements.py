from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from liftlog.schemas.common import not_null


class SupplementCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    default_dose: str | None = Field(default=None, max_length=60)
    notes: str | None = None


class SupplementUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=120)
    default_dose: str | None = Field(default=None, max_length=60)
    notes: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _required_columns(cls, v, info):
        return not_null(v, info)


class SupplementOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    default_dose: str | None
    notes: str | None
    created_at: datetime
    updated_at: datetime


class SupplementLogCreate(BaseModel):
    supplement_id: int
    taken_at: datetime | None = None
    dose: str | None = Field(default=None, max_length=60)
    notes: str | None = None


class SupplementLogUpdate(BaseModel):
    taken_at: datetime | None = None
    dose: str | None = Field(default=None, max_length=60)
    notes: str | None = None

    @field_validator("taken_at", mode="before")
    @classmethod
    def _required_columns(cls, v, info):
        return not_null(v, info)


class SupplementLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    supplement_id: int
    supplement_name: str | None = None
    taken_at: datetime
    dose: str | None
    notes: str | None
