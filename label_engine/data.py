"""
File loading for the command line: designs, column mappings and data rows.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

import pandas as pd

from .models import Design, DesignError, design_from_dict

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xls"}


def read_table(path: PathLike) -> pd.DataFrame:
    """
    Read a CSV or Excel sheet with every cell as text.

    Cells are kept as strings so that codes keep their leading zeros.
    """
    path = Path(path)
    if path.suffix.lower() in EXCEL_SUFFIXES:
        return pd.read_excel(path, dtype=str, engine="openpyxl")
    return pd.read_csv(path, dtype=str, encoding="utf-8-sig")


def to_rows(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """One dict per row; blank cells are left out."""
    rows = []
    for record in df.to_dict(orient="records"):
        rows.append({
            str(column).strip(): value
            for column, value in record.items()
            if not pd.isna(value) and str(value) != ""
        })
    return rows


def load_rows(path: PathLike) -> List[Dict[str, Any]]:
    rows = to_rows(read_table(path))
    logger.debug("Loaded %d rows from %s", len(rows), path)
    return rows


def load_json(path: PathLike) -> Any:
    with Path(path).open("r", encoding="utf-8") as f:
        return json.load(f)


def load_design(path: PathLike) -> Design:
    """
    Load a design from a JSON file.

    Raises:
        DesignError: if the file does not hold a design object
    """
    data = load_json(path)
    if not isinstance(data, dict):
        raise DesignError(f"{path}: expected a JSON object")
    return design_from_dict(data)


def load_mapping(path: PathLike) -> Dict[str, str]:
    """Load an element id -> column name mapping from a JSON object."""
    data = load_json(path)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: mapping must be a JSON object")
    return {str(k): str(v) for k, v in data.items()}
