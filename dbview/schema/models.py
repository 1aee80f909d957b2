"""Pydantic models for the backend schema payload."""

from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator


DEFAULT_COLUMN_TYPE = "VARCHAR"


class ColumnType(str, Enum):
    """Column types accepted when adding a column."""

    VARCHAR = "VARCHAR"
    INT = "INT"
    DECIMAL = "DECIMAL"
    BOOLEAN = "BOOLEAN"

    @classmethod
    def parse(cls, value: "str | ColumnType") -> "ColumnType":
        """Resolve a user-supplied type name, accepting common aliases.

        Args:
            value: A ColumnType or a case-insensitive type name.

        Returns:
            The matching ColumnType.

        Raises:
            ValueError: If the name is not one of the supported types.
        """
        if isinstance(value, ColumnType):
            return value

        key = value.strip().lower()
        for column_type, aliases in _COLUMN_TYPE_ALIASES.items():
            if key in aliases:
                return column_type

        raise ValueError(
            f"Unsupported column type {value!r}; "
            f"expected one of {', '.join(t.value for t in cls)}"
        )


_COLUMN_TYPE_ALIASES = {
    ColumnType.VARCHAR: {"varchar", "text", "string"},
    ColumnType.INT: {"int", "integer"},
    ColumnType.DECIMAL: {"decimal", "real", "float"},
    ColumnType.BOOLEAN: {"boolean", "bool"},
}


class Column(BaseModel):
    """A column of a table, in server-reported order."""

    name: str
    type: str = DEFAULT_COLUMN_TYPE

    @property
    def looks_like_key(self) -> bool:
        """Whether the column is the id column or a *_id reference."""
        return self.name == "id" or self.name.endswith("_id")


class Table(BaseModel):
    """A table reported by the backend."""

    name: str
    columns: list[Column] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def normalize_columns(cls, data: dict) -> dict:
        """Normalize bare column names and null column lists."""
        if not isinstance(data, dict):
            return data

        columns = data.get("columns")
        if columns is None:
            data["columns"] = []
            return data

        if isinstance(columns, list):
            normalized = []
            for col in columns:
                if isinstance(col, str):
                    normalized.append({"name": col, "type": DEFAULT_COLUMN_TYPE})
                elif isinstance(col, dict) and not col.get("type"):
                    # Older backends report an empty type for untyped columns
                    normalized.append({**col, "type": DEFAULT_COLUMN_TYPE})
                else:
                    normalized.append(col)
            data["columns"] = normalized

        return data

    def get_column_names(self) -> list[str]:
        """Get column names in server order."""
        return [col.name for col in self.columns]


class Relationship(BaseModel):
    """A foreign-key style link between two tables."""

    source_table: str
    target_table: str
    source_column: str

    @property
    def natural_key(self) -> tuple[str, str, str]:
        """The (source_table, target_table, source_column) triple."""
        return (self.source_table, self.target_table, self.source_column)


class SchemaSnapshot(BaseModel):
    """The full set of tables and relationships reported by the backend."""

    tables: list[Table] = Field(default_factory=list)
    relationships: list[Relationship] = Field(default_factory=list)

    @field_validator("tables", "relationships", mode="before")
    @classmethod
    def null_as_empty(cls, value):
        """Treat a null list as empty."""
        return [] if value is None else value

    def get_table(self, name: str) -> Table | None:
        """Get a table by name."""
        for table in self.tables:
            if table.name == name:
                return table
        return None

    def get_table_names(self) -> list[str]:
        """Get all table names in server order."""
        return [table.name for table in self.tables]
