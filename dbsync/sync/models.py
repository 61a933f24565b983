"""Data models for comparison and migration operations."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TableDiff(BaseModel):
    """Row counts produced by diffing one table."""

    insert_count: int = Field(default=0, ge=0, description="Keys only in the source")
    update_count: int = Field(default=0, ge=0, description="Keys in both sides with unequal rows")
    unchanged_count: int = Field(default=0, ge=0, description="Keys in both sides with equal rows")
    target_only_count: int = Field(
        default=0, ge=0, description="Keys only in the target; never merged"
    )

    @property
    def consistent(self) -> bool:
        """True when merging would change nothing."""
        return self.insert_count == 0 and self.update_count == 0

    @property
    def merge_operation_count(self) -> int:
        """Number of statements a merge would issue."""
        return self.insert_count + self.update_count


class TableComparison(BaseModel):
    """Full comparison record for one table."""

    table_name: str
    diff: TableDiff
    source_row_count: int = Field(default=0, ge=0)
    target_row_count: int = Field(default=0, ge=0)

    @property
    def consistent(self) -> bool:
        return self.diff.consistent

    @property
    def merge_operation_count(self) -> int:
        return self.diff.merge_operation_count

    def describe(self) -> str:
        """Short summary used in the HTTP report."""
        if self.diff.consistent:
            return "Data consistent"

        parts = []
        if self.diff.insert_count > 0:
            parts.append(f"Missing {self.diff.insert_count} rows")
        if self.diff.update_count > 0:
            parts.append(f"{self.diff.update_count} rows need update")
        return ", ".join(parts)

    def merge_description(self) -> str:
        """Detailed summary covering every bucket."""
        parts = []
        if self.diff.insert_count > 0:
            parts.append(f"{self.diff.insert_count} rows to insert")
        if self.diff.update_count > 0:
            parts.append(f"{self.diff.update_count} rows to update")
        if self.diff.unchanged_count > 0:
            parts.append(f"{self.diff.unchanged_count} rows unchanged")
        if self.diff.target_only_count > 0:
            parts.append(f"{self.diff.target_only_count} rows only in target")
        return ", ".join(parts) if parts else "No rows to merge"


class MergeResult(BaseModel):
    """Statements applied while merging one table."""

    inserted_count: int = Field(default=0, ge=0)
    updated_count: int = Field(default=0, ge=0)


class _ReportModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TableDifference(_ReportModel):
    """Per-table entry of the comparison report."""

    consistent: bool
    insert_count: int = Field(..., ge=0)
    update_count: int = Field(..., ge=0)
    description: str

    @classmethod
    def from_comparison(cls, comparison: TableComparison) -> "TableDifference":
        return cls(
            consistent=comparison.consistent,
            insert_count=comparison.diff.insert_count,
            update_count=comparison.diff.update_count,
            description=comparison.describe(),
        )


class CompareReport(_ReportModel):
    """Result of comparing every common table."""

    success: bool = True
    time_range: str
    total_tables: int = Field(..., ge=0)
    consistent_tables: int = Field(..., ge=0)
    inconsistent_tables: int = Field(..., ge=0)
    table_differences: dict[str, TableDifference | str] = Field(
        default_factory=dict,
        description="Per-table differences; a string when the table could not be compared",
    )

    @property
    def failed_tables(self) -> list[str]:
        """Tables whose comparison raised."""
        return [name for name, diff in self.table_differences.items() if isinstance(diff, str)]


class MigrateReport(_ReportModel):
    """Result of migrating every source table."""

    success: bool = True
    migrated_tables: list[str] = Field(default_factory=list)
    failed_tables: list[str] = Field(
        default_factory=list, description="Entries formatted as '<table>: <error>'"
    )
    total_tables: int = Field(..., ge=0)
    success_count: int = Field(..., ge=0)
    failed_count: int = Field(..., ge=0)
    time_range: str


class ErrorReport(_ReportModel):
    """Body returned when a request fails as a whole."""

    success: bool = False
    error: str
