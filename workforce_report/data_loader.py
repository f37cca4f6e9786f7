"""Spreadsheet loading helpers for the three snapshot rosters."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pandas as pd

from workforce_report.fields import FIELD_ALIASES

SAMPLE_DIR = Path(__file__).resolve().parent.parent / "data"
SAMPLE_FILES = {
    "employees": "sample_employees.csv",
    "participants": "sample_participants.csv",
    "institutions": "sample_institutions.csv",
}
REQUIRED_FIELDS = {
    "employees": ("name",),
    "participants": ("name",),
    "institutions": ("code",),
}


class DataLoadError(Exception):
    pass


def read_table(path: str | Path, sheet: Optional[str] = None) -> pd.DataFrame:
    """Read CSV or Excel with every cell kept as text."""
    file_path = Path(path)
    if not file_path.exists():
        raise DataLoadError(f"File not found: {file_path}")
    suffix = file_path.suffix.lower()
    if suffix == ".csv":
        return pd.read_csv(file_path, dtype=str, keep_default_na=False)
    if suffix in {".xlsx", ".xlsm", ".xls"}:
        read_kwargs = {"dtype": str, "keep_default_na": False}
        if sheet:
            read_kwargs["sheet_name"] = sheet
        return pd.read_excel(file_path, **read_kwargs)
    raise DataLoadError(f"Unsupported file format: {suffix}")


def missing_fields(columns: Iterable[str], fields: Iterable[str]) -> List[str]:
    """Logical fields for which none of the aliases is a column."""
    present = {str(column).strip() for column in columns}
    return [field for field in fields if not present.intersection(FIELD_ALIASES[field])]


def frame_to_records(df: pd.DataFrame) -> List[dict]:
    df = df.rename(columns=lambda column: str(column).strip())
    return df.to_dict(orient="records")


def load_records(path: str | Path, kind: str, sheet: Optional[str] = None) -> List[dict]:
    """Load one roster as plain records after checking its required fields."""
    df = read_table(path, sheet)
    missing = missing_fields(df.columns, REQUIRED_FIELDS[kind])
    if missing:
        raise DataLoadError(f"Missing columns in {path}: {missing}")
    return frame_to_records(df)


def load_snapshot(
    employees: str | Path,
    participants: Optional[str | Path],
    institutions: str | Path,
) -> Dict[str, List[dict]]:
    """Load the employee roster, participant roster and institution registry.

    The participant roster is optional; an empty list is used when it is
    ``None``.
    """
    return {
        "employees": load_records(employees, "employees"),
        "participants": load_records(participants, "participants") if participants else [],
        "institutions": load_records(institutions, "institutions"),
    }


def load_sample_snapshot() -> Dict[str, List[dict]]:
    """Bundled sample snapshot so the dashboard can start without uploads."""
    return {kind: load_records(SAMPLE_DIR / name, kind) for kind, name in SAMPLE_FILES.items()}
