"""CSV extraction for published spreadsheets and data exports."""

import csv
import io
from typing import Dict, List, Mapping, Optional, Sequence

from app.logging import get_logger

from .headers import SemanticField, looks_like_header, match_headers
from .records import RawRecord, RecordExtractor

logger = get_logger(__name__, component="extraction")


class DelimitedTextExtractor(RecordExtractor):
    """Extract raw records from CSV text.

    Columns are located by header synonyms unless an explicit column map is
    given. An explicit map lists, per field, candidate column names in
    preference order; the first one present in the file is used.

    Attributes:
        column_map: Optional explicit field -> column names mapping
        delimiter: Field delimiter (default ",")
    """

    def __init__(
        self,
        column_map: Optional[Mapping[SemanticField, Sequence[str]]] = None,
        delimiter: str = ",",
    ) -> None:
        self.column_map = column_map
        self.delimiter = delimiter

    def _resolve_columns(self, fieldnames: Sequence[str]) -> Dict[SemanticField, str]:
        if self.column_map is None:
            index = match_headers(fieldnames)
            return {field: fieldnames[position] for field, position in index.items()}

        present = {name.strip(): name for name in fieldnames}
        columns: Dict[SemanticField, str] = {}
        for field, candidates in self.column_map.items():
            for candidate in candidates:
                if candidate in present:
                    columns[field] = present[candidate]
                    break
        return columns

    def extract(self, text: str, base_url: str = "") -> List[RawRecord]:
        """Parse CSV text into raw records.

        Rows with no employer value and header rows repeated in the body
        are skipped.

        Args:
            text: CSV content including the header line

        Returns:
            Raw records in file order
        """
        if not text or not text.strip():
            return []

        reader = csv.DictReader(io.StringIO(text.lstrip("﻿")), delimiter=self.delimiter)
        fieldnames = list(reader.fieldnames or [])
        columns = self._resolve_columns(fieldnames)
        if SemanticField.EMPLOYER not in columns:
            logger.debug(
                "No employer column found in CSV",
                extra={"event": "extraction.csv.no_employer_column", "headers": fieldnames},
            )
            return []

        records: List[RawRecord] = []
        for row in reader:
            if fieldnames and looks_like_header(row.get(fieldnames[0])):
                continue
            record = RawRecord()
            for field, column in columns.items():
                value = row.get(column)
                if isinstance(value, str):
                    record.set(field, " ".join(value.split()))
            if record.get(SemanticField.EMPLOYER) is None:
                continue
            records.append(record)

        logger.debug(
            "Extracted records from CSV",
            extra={"event": "extraction.csv.completed", "records": len(records)},
        )
        return records
