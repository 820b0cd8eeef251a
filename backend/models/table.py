"""Pydantic schemas describing the fixed analytics schema."""
from typing import Optional
from pydantic import BaseModel, ConfigDict


class ColumnMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    data_type: str
    is_nullable: bool = False
    is_primary_key: bool = False
    is_unique: bool = False
    foreign_key_ref: Optional[str] = None   # "OtherTable.column"
    default: Optional[str] = None

    @property
    def is_foreign_key(self) -> bool:
        return self.foreign_key_ref is not None


class TableMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    table_name: str
    columns: tuple[ColumnMetadata, ...]
    primary_date_column: Optional[str] = None
    notes: tuple[str, ...] = ()

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]


class DateColumnCorrection(BaseModel):
    """A table that exposes separate start/end date columns instead of one generic column."""
    model_config = ConfigDict(frozen=True)

    table: str
    start_column: str
    end_column: str
    generic_column: str = "date"
