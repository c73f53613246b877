"""
Tabular ingestor for commerce platform exports.

Reads an uploaded export into flat rows: one dict per data row, keyed by
header name, every value a string ("" when the cell is empty).

- .xlsx → openpyxl, .xls → xlrd, first sheet only
- anything else → UTF-8 delimited text with a header row

Decode failures never raise out of ingest(); they come back as a single
diagnostic next to an empty row list.
"""

import csv
import warnings
from dataclasses import dataclass, field
from io import BytesIO, StringIO
from pathlib import Path
from typing import Optional

import pandas as pd
import structlog

from config import settings
from exceptions import TabularFileError
from models.import_preview import Diagnostic

logger = structlog.get_logger(__name__)

FlatRow = dict[str, str]

EXCEL_ENGINES = {
    ".xlsx": "openpyxl",
    ".xls": "xlrd",
}


@dataclass
class IngestResult:
    """Rows read from a file plus any decode diagnostics."""
    rows: list[FlatRow] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def total_rows(self) -> int:
        return len(self.rows)

    @property
    def success(self) -> bool:
        """True if the file decoded without problems."""
        return len(self.diagnostics) == 0


def is_excel_file(file_name: str) -> bool:
    """Check the extension for a spreadsheet binary."""
    return Path(file_name or "").suffix.lower() in EXCEL_ENGINES


def ingest(file_bytes: bytes, file_name: str) -> IngestResult:
    """
    Read an uploaded export into flat rows.

    Args:
        file_bytes: Raw file content
        file_name: Original file name (extension selects the decoder)

    Returns:
        IngestResult with rows and decode diagnostics
    """
    logger.info("ingesting_file", file_name=file_name, size=len(file_bytes))

    if is_excel_file(file_name):
        result = _ingest_excel(file_bytes, file_name)
    else:
        result = _ingest_delimited(file_bytes)

    logger.info(
        "ingest_complete",
        file_name=file_name,
        rows=result.total_rows,
        diagnostics=len(result.diagnostics),
    )
    return result


def ingest_text(text: str) -> IngestResult:
    """Read canonical delimited text (the commit payload) into flat rows."""
    return _ingest_delimited(text.encode("utf-8"))


def to_canonical_text(file_bytes: bytes, file_name: str) -> str:
    """
    Re-serialize an export as CSV text for the commit request.

    Spreadsheets are converted from their first sheet; delimited text
    passes through unchanged.

    Raises:
        TabularFileError: If the file cannot be decoded
    """
    if not is_excel_file(file_name):
        try:
            return file_bytes.decode(settings.default_csv_encoding)
        except UnicodeDecodeError as e:
            raise TabularFileError(
                message="File is not valid UTF-8 text",
                details={"file_name": file_name, "original_error": str(e)},
            )

    df, error = _read_first_sheet(file_bytes, file_name)
    if df is None:
        raise TabularFileError(
            message=error,
            details={"file_name": file_name},
        )

    return df.to_csv(index=False)


# ===================
# DECODERS
# ===================

def _ingest_excel(file_bytes: bytes, file_name: str) -> IngestResult:
    """Decode the first sheet of a spreadsheet binary."""
    df, error = _read_first_sheet(file_bytes, file_name)
    if df is None:
        return IngestResult(diagnostics=[Diagnostic(message=error)])

    return IngestResult(rows=_to_rows(df))


def _read_first_sheet(file_bytes: bytes, file_name: str) -> tuple[Optional[pd.DataFrame], str]:
    """
    Load the first sheet as strings.

    Returns:
        (DataFrame, "") on success, (None, error message) on failure
    """
    engine = EXCEL_ENGINES[Path(file_name).suffix.lower()]

    try:
        excel = pd.ExcelFile(BytesIO(file_bytes), engine=engine)
    except Exception as e:
        logger.error("excel_read_failed", file_name=file_name, error=str(e))
        return None, f"Excel parse error: {e}"

    if not excel.sheet_names:
        return None, "No sheets found in Excel file"

    try:
        df = excel.parse(excel.sheet_names[0], dtype=str, na_filter=False)
    except Exception as e:
        logger.error("excel_sheet_read_failed", file_name=file_name, error=str(e))
        return None, f"Excel parse error: {e}"

    df = df.fillna("")
    df.columns = [str(col) for col in df.columns]

    # Blank spreadsheet rows are formatting, not data
    df = df[(df != "").any(axis=1)].reset_index(drop=True)
    return df, ""


def _ingest_delimited(file_bytes: bytes) -> IngestResult:
    """Decode delimited text with a header row."""
    result = IngestResult()

    try:
        text = file_bytes.decode(settings.default_csv_encoding)
    except UnicodeDecodeError as e:
        result.diagnostics.append(Diagnostic(message=f"Parse error: {e}"))
        return result

    if not text.strip():
        return result

    try:
        header = pd.read_csv(BytesIO(text.encode("utf-8")), nrows=0, dtype=str)
    except Exception as e:
        logger.error("csv_header_read_failed", error=str(e))
        result.diagnostics.append(Diagnostic(message=f"Parse error: {e}"))
        return result

    expected = len(header.columns)
    bad_rows = iter(_overlong_record_rows(text, expected))

    def keep_bad_line(bad_line: list[str]) -> list[str]:
        row_num = next(bad_rows, None)
        message = f"Too many fields: expected {expected} fields but parsed {len(bad_line)}"
        if row_num is not None:
            message = f"Row {row_num}: {message}"
        result.diagnostics.append(Diagnostic(message=message, row=row_num))
        return bad_line[:expected]

    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", pd.errors.ParserWarning)
            df = pd.read_csv(
                BytesIO(text.encode("utf-8")),
                dtype=str,
                keep_default_na=False,
                na_filter=False,
                skip_blank_lines=True,
                engine="python",
                on_bad_lines=keep_bad_line,
            )
    except Exception as e:
        logger.error("csv_read_failed", error=str(e))
        return IngestResult(diagnostics=[Diagnostic(message=f"Parse error: {e}")])

    result.rows = _to_rows(df.fillna(""))
    return result


def _to_rows(df: pd.DataFrame) -> list[FlatRow]:
    """DataFrame → list of string-valued dicts."""
    columns = [str(col) for col in df.columns]
    return [
        {col: "" if value is None else str(value) for col, value in zip(columns, values)}
        for values in df.itertuples(index=False, name=None)
    ]


def _overlong_record_rows(text: str, expected: int) -> list[int]:
    """
    File row numbers of records with more than `expected` fields.

    Blank lines are skipped the same way the reader skips them, so the
    header is row 1 and the first data record is row 2.
    """
    rows = []
    record_num = 0
    for fields in csv.reader(StringIO(text)):
        if not fields:
            continue
        record_num += 1
        if record_num > 1 and len(fields) > expected:
            rows.append(record_num)
    return rows
