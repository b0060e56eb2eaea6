import logging
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence

import pandas as pd

from errors import SourceUnreadable

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xls"}

# Spreadsheet header -> record field
PATIENT_COLUMNS = {
    "Paciente": "name",
    "Formula": "formula_ref",
    "Cantidad_comp": "quantity",
    "Nr_de_Frasco": "vial_count",
    "Receta": "prescription_type",
}
FORMULA_COLUMNS = {
    "Nº": "id",
    "Detalle": "detail_text",
}


@dataclass(frozen=True)
class PatientRecord:
    name: Any = None
    formula_ref: Any = None
    quantity: int | None = None
    vial_count: int | None = None
    prescription_type: str | None = None
    row: int | None = None

    @property
    def label(self) -> str:
        return str(self.name) if self.name is not None else f"<row {self.row}>"


@dataclass(frozen=True)
class FormulaRecord:
    id: Any = None
    detail_text: str | None = None


def _clean(value):
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        return value or None
    if pd.isna(value):
        return None
    return value


def _to_int(value, field: str, row: int):
    if value is None:
        return None
    if isinstance(value, bool):
        number = None
    elif isinstance(value, int):
        number = value
    elif isinstance(value, float) and value.is_integer():
        number = int(value)
    else:
        try:
            number = int(str(value).strip())
        except ValueError:
            try:
                as_float = float(str(value).strip())
                number = int(as_float) if as_float.is_integer() else None
            except ValueError:
                number = None
    if number is None or number < 0:
        logger.warning("Row %d: %s=%r is not a non-negative integer, leaving it unset", row, field, value)
        return None
    return number


def read_table(path) -> list[dict]:
    """Read the first sheet of an Excel workbook (or a CSV file) into row dicts keyed by header."""
    path = Path(path)
    suffix = path.suffix.lower()
    try:
        if suffix in EXCEL_SUFFIXES:
            df = pd.read_excel(path, sheet_name=0, dtype=object)
        elif suffix == ".csv":
            df = pd.read_csv(path, dtype=object)
        else:
            raise SourceUnreadable(f"Unsupported spreadsheet format '{suffix or path.name}': {path}")
    except SourceUnreadable:
        raise
    except (OSError, ValueError, ImportError, zipfile.BadZipFile) as e:
        raise SourceUnreadable(f"Could not read {path}: {e}") from e

    df.columns = [str(c).strip() for c in df.columns]
    rows = [{k: _clean(v) for k, v in row.items()} for row in df.to_dict(orient="records")]
    logger.debug("Read %d rows from %s (columns: %s)", len(rows), path, list(df.columns))
    return rows


def _project(row: dict, columns: dict) -> dict:
    return {field: row.get(header) for header, field in columns.items()}


def to_patient(row: dict, row_number: int) -> PatientRecord:
    fields = _project(row, PATIENT_COLUMNS)
    prescription_type = fields["prescription_type"]
    return PatientRecord(
        name=fields["name"],
        formula_ref=fields["formula_ref"],
        quantity=_to_int(fields["quantity"], "Cantidad_comp", row_number),
        vial_count=_to_int(fields["vial_count"], "Nr_de_Frasco", row_number),
        prescription_type=str(prescription_type) if prescription_type is not None else None,
        row=row_number,
    )


def to_formula(row: dict) -> FormulaRecord:
    fields = _project(row, FORMULA_COLUMNS)
    detail = fields["detail_text"]
    return FormulaRecord(id=fields["id"], detail_text=str(detail) if detail is not None else None)


def load_records(patients_path, formulas_path) -> tuple[tuple[PatientRecord, ...], tuple[FormulaRecord, ...]]:
    # Header is spreadsheet row 1, so data starts at row 2.
    patients = tuple(to_patient(row, i) for i, row in enumerate(read_table(patients_path), 2))
    formulas = tuple(to_formula(row) for row in read_table(formulas_path))
    return patients, formulas


def _loose_equals(left, right) -> bool:
    if left is None or right is None:
        return False
    if isinstance(left, str) and isinstance(right, str):
        return left.strip() == right.strip()
    try:
        return float(left) == float(right)
    except (TypeError, ValueError):
        return str(left).strip() == str(right).strip()


def resolve_formula(formulas: Sequence[FormulaRecord], reference) -> FormulaRecord | None:
    """Return the first formula whose id loosely equals ``reference``.

    Spreadsheets may repeat an id; the earliest row always wins.
    """
    return next((f for f in formulas if _loose_equals(f.id, reference)), None)
