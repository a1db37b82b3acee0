from __future__ import annotations

import logging
import zipfile
from io import BytesIO
from pathlib import Path
from typing import Any, BinaryIO, Mapping, Union

import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException

from remedial.aggregation import analyze_class
from remedial.config import CLAMP_NEGATIVE_SCORES, MAPPING_SHEET, RESULTS_SHEET
from remedial.models import ClassAnalysis
from remedial.taxonomy import build_taxonomy, read_student_rows

logger = logging.getLogger(__name__)

MISSING_SHEETS_MESSAGE = (
    f"Invalid File: Must contain '{MAPPING_SHEET}' and '{RESULTS_SHEET}' sheets."
)

TEMPLATE_MAPPING_ROWS = [
    {"Question No": "Q1", "Skill Code": "M4.N.1", "Skill Description": "Multiplication", "Max Marks": 5},
    {"Question No": "Q2", "Skill Code": "M4.F.2", "Skill Description": "Equivalent Fractions", "Max Marks": 5},
    {"Question No": "Q3", "Skill Code": "M4.G.3", "Skill Description": "Area and Perimeter", "Max Marks": 10},
    {"Question No": "Q4", "Skill Code": "M4.N.1", "Skill Description": "Multiplication", "Max Marks": 5},
]
TEMPLATE_RESULT_ROWS = [
    {"Student Name": "Student A", "Student ID": "1001", "Q1": 5, "Q2": 4, "Q3": 8, "Q4": 5},
    {"Student Name": "Student B", "Student ID": "1002", "Q1": 3, "Q2": 2, "Q3": 5, "Q4": 3},
    {"Student Name": "Student C", "Student ID": "1003", "Q1": 5, "Q2": 5, "Q3": 9, "Q4": 4},
]

WorkbookSource = Union[str, Path, bytes, BinaryIO]
SheetData = Union[pd.DataFrame, list]


class FormatError(ValueError):
    """Raised when an uploaded workbook cannot be analyzed at all."""


def _records(sheet: SheetData) -> list[dict[str, Any]]:
    if isinstance(sheet, pd.DataFrame):
        frame = sheet.astype(object).where(sheet.notna(), None)
        return frame.to_dict(orient="records")
    return [dict(row) for row in sheet]


def analyze_sheets(
    sheets: Mapping[str, SheetData], clamp_negative: bool = CLAMP_NEGATIVE_SCORES
) -> ClassAnalysis:
    if MAPPING_SHEET not in sheets or RESULTS_SHEET not in sheets:
        raise FormatError(MISSING_SHEETS_MESSAGE)

    taxonomy = build_taxonomy(_records(sheets[MAPPING_SHEET]))
    raw_scores = read_student_rows(_records(sheets[RESULTS_SHEET]), taxonomy)
    return analyze_class(taxonomy, raw_scores, clamp_negative)


def _as_excel_input(source: WorkbookSource):
    if isinstance(source, (bytes, bytearray)):
        return BytesIO(source)
    return source


def parse_workbook(
    source: WorkbookSource, clamp_negative: bool = CLAMP_NEGATIVE_SCORES
) -> ClassAnalysis:
    """Read an uploaded .xlsx and build the class analysis from it."""
    try:
        workbook = pd.ExcelFile(_as_excel_input(source), engine="openpyxl")
    except (zipfile.BadZipFile, InvalidFileException, OSError, ValueError, KeyError) as exc:
        logger.warning("Could not open workbook: %s", exc)
        raise FormatError(f"Invalid File: could not read workbook ({exc}).") from exc

    with workbook:
        if MAPPING_SHEET not in workbook.sheet_names or RESULTS_SHEET not in workbook.sheet_names:
            logger.warning("Workbook sheets %s are missing a required sheet", workbook.sheet_names)
            raise FormatError(MISSING_SHEETS_MESSAGE)
        sheets = {
            name: workbook.parse(name, dtype=object)
            for name in (MAPPING_SHEET, RESULTS_SHEET)
        }

    return analyze_sheets(sheets, clamp_negative)


def build_template_workbook() -> bytes:
    output = BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        pd.DataFrame(TEMPLATE_MAPPING_ROWS).to_excel(writer, index=False, sheet_name=MAPPING_SHEET)
        pd.DataFrame(TEMPLATE_RESULT_ROWS).to_excel(writer, index=False, sheet_name=RESULTS_SHEET)
    return output.getvalue()
