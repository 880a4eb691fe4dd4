import base64
import binascii
import io
from dataclasses import dataclass, field
from typing import Any, Dict, List

import pandas as pd

from app.utils.logger import logger

CSV_EXTENSIONS = (".csv",)
EXCEL_EXTENSIONS = (".xlsx", ".xls")


class TabularParseError(ValueError):
    """Raised when an uploaded table cannot be turned into headers and rows."""


class UnsupportedFileTypeError(TabularParseError):
    pass


@dataclass
class ParsedTable:
    headers: List[str]
    rows: List[Dict[str, Any]] = field(default_factory=list)


def _read_csv(file_data: str) -> pd.DataFrame:
    try:
        return pd.read_csv(io.StringIO(file_data), skip_blank_lines=True)
    except pd.errors.EmptyDataError:
        raise TabularParseError("CSV bestand is leeg")
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise TabularParseError(f"Fout bij het verwerken van CSV bestand: {e}")


def _read_excel(file_data: str) -> pd.DataFrame:
    try:
        content = base64.b64decode(file_data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise TabularParseError(f"Excel bestand is geen geldige base64 data: {e}")

    try:
        # First sheet only
        return pd.read_excel(io.BytesIO(content), sheet_name=0, header=0)
    except Exception as e:
        logger.error(f"Excel parsing error: {e}")
        raise TabularParseError(f"Fout bij het verwerken van Excel bestand: {e}")


def parse_table(file_name: str, file_data: str) -> ParsedTable:
    """
    Parse an uploaded CSV (plain text) or Excel workbook (base64) into headers and rows.

    Headers are trimmed and lower-cased, fully empty rows are dropped and empty
    cells become None.
    """
    name = file_name.lower()
    if name.endswith(CSV_EXTENSIONS):
        df = _read_csv(file_data)
    elif name.endswith(EXCEL_EXTENSIONS):
        df = _read_excel(file_data)
    else:
        raise UnsupportedFileTypeError(
            "Niet ondersteund bestandsformaat. Alleen CSV en Excel (.xlsx, .xls) worden ondersteund."
        )

    df.columns = [str(col).strip().lower() for col in df.columns]
    df = df.dropna(how="all")

    if len(df.columns) == 0:
        raise TabularParseError("Geen kolommen gevonden in bestand")
    if df.empty:
        raise TabularParseError("Geen gegevensrijen gevonden in bestand")

    df = df.astype(object).where(pd.notna(df), None)
    rows = df.to_dict(orient="records")
    logger.info(f"📊 Data parsing completed: {len(rows)} rows, {len(df.columns)} columns")
    return ParsedTable(headers=list(df.columns), rows=rows)
