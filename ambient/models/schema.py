"""
Schema Descriptor Models

Plain records mirroring ``information_schema`` rows. They are recreated on
every introspection call and never persisted.

API payloads use camelCase keys (``maxLength``, ``fromTable``), so every model
here derives from ``CamelModel``. Python code uses the snake_case attributes.
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialising to camelCase while accepting either spelling."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ColumnDescriptor(CamelModel):
    """One row of ``information_schema.columns``."""

    name: str = Field(..., description="Column name")
    data_type: str = Field(..., alias="type", description="Column data type")
    nullable: bool = Field(default=False, description="Whether the column accepts NULL")
    default: str | None = Field(None, description="Column default expression")
    max_length: int | None = Field(None, description="character_maximum_length, if any")

    @property
    def type_label(self) -> str:
        """Type with its length suffix, e.g. ``character varying(255)``."""
        if self.max_length:
            return f"{self.data_type}({self.max_length})"
        return self.data_type


class TableDescriptor(CamelModel):
    """One row of ``information_schema.tables``."""

    name: str = Field(..., description="Table name")
    table_type: str = Field(default="BASE TABLE", alias="type", description="BASE TABLE, VIEW, ...")


class TableWithColumns(CamelModel):
    """A table name with its column descriptors.

    Callers send this shape as either ``{"table": ...}`` or ``{"name": ...}``.
    """

    table: str = Field(
        ...,
        validation_alias=AliasChoices("table", "name"),
        serialization_alias="table",
        description="Table name",
    )
    table_type: str | None = Field(None, alias="type", description="Table type, if known")
    columns: list[ColumnDescriptor] = Field(default_factory=list)


class ForeignKey(CamelModel):
    """A foreign-key edge between two columns, used to draw diagram edges."""

    from_table: str
    from_column: str
    to_table: str
    to_column: str
    constraint_name: str
