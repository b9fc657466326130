"""
Schema validation for record frames and report tables.

Tables leaving the engine are validated (columns, dtypes, NA rules) so
drift in the record shape becomes an immediate local failure.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Set

import pandas as pd


@dataclass
class ColumnSpec:
    """Expected dtype, NA rule and value constraints for one column."""
    name: str
    dtype: Optional[str] = None  # "Int64", "float64" or None for labels
    nullable: bool = True
    unique: bool = False
    allowed_values: Optional[Set[Any]] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None


@dataclass
class Schema:
    """Named table layout; every listed column is required unless narrowed."""
    name: str
    columns: List[ColumnSpec]
    required_columns: List[str] = field(default_factory=list)
    min_rows: int = 0
    
    def __post_init__(self):
        if not self.required_columns:
            self.required_columns = [c.name for c in self.columns]


class SchemaError(Exception):
    """A table leaving the engine does not match its schema."""


# =============================================================================
# Report tables
# =============================================================================

# One row per record, categorical labels already normalised
RECORD_FRAME_SCHEMA = Schema(
    name="record_frame",
    columns=[
        ColumnSpec("company", nullable=False),
        ColumnSpec("status", nullable=False),
        ColumnSpec("map_status", nullable=False),
        ColumnSpec("deviation", nullable=False),
        ColumnSpec("mineral_ri", nullable=False),
        ColumnSpec("status_date", nullable=True),
        ColumnSpec("lon", dtype="float64", nullable=True),
        ColumnSpec("lat", dtype="float64", nullable=True),
    ],
)

TOP_COMPANIES_SCHEMA = Schema(
    name="top_companies",
    columns=[
        ColumnSpec("company", nullable=False, unique=True),
        ColumnSpec("count", dtype="Int64", nullable=False, min_value=1),
    ],
)

DEVIATION_OUTCOME_SCHEMA = Schema(
    name="deviation_vs_outcome",
    columns=[
        ColumnSpec("deviation", nullable=False),
        ColumnSpec("status", nullable=False),
        ColumnSpec("count", dtype="Int64", nullable=False, min_value=1),
    ],
)

MINERAL_RIGHTS_SCHEMA = Schema(
    name="mineral_rights_split",
    columns=[
        ColumnSpec("mineral_ri", nullable=False, unique=True),
        ColumnSpec("count", dtype="Int64", nullable=False, min_value=1),
        ColumnSpec("pct", dtype="float64", nullable=False, min_value=0, max_value=1),
    ],
)

MAP_STATUS_SCHEMA = Schema(
    name="map_status_split",
    columns=[
        ColumnSpec("map_status", nullable=False, unique=True),
        ColumnSpec("count", dtype="Int64", nullable=False, min_value=1),
    ],
)


# =============================================================================
# Validation
# =============================================================================

_DTYPE_CHECKS = {
    "Int64": pd.api.types.is_integer_dtype,
    "float64": pd.api.types.is_float_dtype,
}


def validate_column(
    df: pd.DataFrame,
    spec: ColumnSpec,
    context: str = "",
) -> List[str]:
    """Problems with one column of `df` under `spec` (empty list when clean)."""
    name = spec.name
    if name not in df.columns:
        return [f"Missing column: {name}"]

    col = df[name]
    present = col.notna()
    errors = []

    dtype_ok = _DTYPE_CHECKS.get(spec.dtype)
    if dtype_ok is not None and not dtype_ok(col):
        errors.append(f"Column {name}: expected {spec.dtype}, got {col.dtype}")

    if not spec.nullable and not present.all():
        errors.append(f"Column {name}: {int((~present).sum())} NA values not allowed")

    if spec.unique and col.duplicated().any():
        errors.append(f"Column {name}: {int(col.duplicated().sum())} duplicate values not allowed")

    if spec.allowed_values is not None:
        bad = col[present & ~col.isin(spec.allowed_values)]
        if len(bad):
            errors.append(f"Column {name}: invalid values {list(bad.unique()[:5])}")

    if spec.min_value is not None and (col[present] < spec.min_value).any():
        errors.append(f"Column {name}: values below min {spec.min_value}")

    if spec.max_value is not None and (col[present] > spec.max_value).any():
        errors.append(f"Column {name}: values above max {spec.max_value}")

    return errors


def validate_schema(
    df: pd.DataFrame,
    schema: Schema,
    context: str = "",
    raise_on_error: bool = True,
) -> List[str]:
    """
    Check `df` against `schema`.

    Args:
        df: Table to check
        schema: Expected layout
        context: Caller name, appended to frame-level messages
        raise_on_error: Raise instead of returning when problems are found

    Returns:
        Problems found (empty when the table conforms)

    Raises:
        SchemaError: If raise_on_error and anything is wrong
    """
    suffix = f" ({context})" if context else ""
    errors = []

    if len(df) < schema.min_rows:
        errors.append(f"Expected at least {schema.min_rows} rows, got {len(df)}{suffix}")

    missing = [c for c in schema.required_columns if c not in df.columns]
    if missing:
        errors.append(f"Missing required columns: {missing}{suffix}")

    for spec in schema.columns:
        if spec.name not in missing:
            errors.extend(validate_column(df, spec, context))

    if errors and raise_on_error:
        raise SchemaError(f"Table '{schema.name}' failed validation{suffix}:\n" + "\n".join(errors))

    return errors

