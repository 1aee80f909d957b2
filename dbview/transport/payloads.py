"""Request and response bodies of the backend REST contract."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from ..schema.models import ColumnType


class QueryRequest(BaseModel):
    query: str


class QueryResponse(BaseModel):
    data: list[dict[str, Any]] = Field(default_factory=list)

    @field_validator("data", mode="before")
    @classmethod
    def null_as_empty(cls, value):
        return [] if value is None else value


class AddColumnRequest(BaseModel):
    table_name: str
    column_name: str
    column_type: ColumnType


class UpdateCellRequest(BaseModel):
    """Record ids and values always travel as strings."""

    table_name: str
    record_id: str
    column_name: str
    new_value: str


class InsertRowRequest(BaseModel):
    table_name: str


class DeleteRowRequest(BaseModel):
    table_name: str
    record_id: str
