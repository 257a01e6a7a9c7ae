"""
CSV Sink

Reads and writes the delimited files exchanged between the batch jobs.
"""
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence, Union

import pandas as pd

from src.taxscout.models.lien import LIST_SEPARATOR
from src.taxscout.utils.logger import get_logger

logger = get_logger(__name__)


def _cell(value: Any) -> Any:
    if isinstance(value, (list, tuple, set)):
        return LIST_SEPARATOR.join(str(v) for v in value)
    if value is None:
        return ""
    return value


def write_csv(
    rows: Iterable[Dict[str, Any]],
    path: Union[str, Path],
    columns: Sequence[str],
) -> int:
    """
    Write rows with a fixed column order.

    Missing keys become empty cells; list values are joined with " | ".

    Returns:
        Number of rows written
    """
    records = [{column: _cell(row.get(column)) for column in columns} for row in rows]
    df = pd.DataFrame(records, columns=list(columns))

    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output_path, index=False)

    logger.info("csv_written", path=str(output_path), rows=len(df), columns=len(columns))
    return len(df)


def read_csv_rows(path: Union[str, Path]) -> List[Dict[str, str]]:
    """
    Read a CSV into a list of dicts with every cell as a string.

    Raises:
        FileNotFoundError: Input file does not exist
    """
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    logger.info("csv_loaded", path=str(path), rows=len(df))
    return df.to_dict(orient="records")
