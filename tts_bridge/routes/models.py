"""Pydantic request bodies for API endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class OperationBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    operation: int
    guid: str | None = None
    script: str | None = None
    custom_message: str | None = Field(default=None, alias="customMessage")


class LuaBody(BaseModel):
    code: str
    guid: str = "-1"
