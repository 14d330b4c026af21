"""Reader for the metafield template CSV."""
import logging
from pathlib import Path
from typing import List, Union

import pandas as pd

from ..errors import SourceFormatError
from ..models import ImportRow

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["Handle"]
OPTIONAL_COLUMNS = ["Tracklist", "Format", "Label", "ReleaseYear", "Description"]


def read_import_rows(path: Union[str, Path]) -> List[ImportRow]:
    """
    Read every row of the CSV into memory before any processing starts.

    Every cell is read as text and empty cells stay empty strings; quoted
    cells may span several lines (tracklists do).

    Raises:
        FileNotFoundError: If the file does not exist
        pandas.errors.ParserError: If the file is not valid CSV
        SourceFormatError: If the Handle column is missing
    """
    path = Path(path)
    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8-sig")
    except pd.errors.EmptyDataError:
        logger.warning("⚠️ %s is empty", path)
        return []

    df.columns = [str(c).strip() for c in df.columns]
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise SourceFormatError(f"{path}: missing required column(s) {', '.join(missing)}")
    for column in OPTIONAL_COLUMNS:
        if column not in df.columns:
            df[column] = ""

    rows = [ImportRow.model_validate(record) for record in df.to_dict(orient="records")]
    logger.info("✅ Read %s rows from %s", len(rows), path)
    return rows
