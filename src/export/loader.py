"""Batch loader for already-fetched executive orders and their source rows.

Reads either a JSON array or JSONL (one document per line). Each document
carries a ``sources`` list:

    {"source_name", "source_url", "external_reference_id", "fetch_date",
     "specificData"}

``specificData`` may be an object, a JSON-encoded string, or absent; the raw
database column name ``source_specific_data`` is accepted as well. A payload
that fails to parse is logged and treated as absent so one bad source never
aborts the batch.
"""

import json
from pathlib import Path
from typing import Any

from src.aggregation.models import PolicyDocument
from src.shared.utils import setup_logger


class BatchLoader:
    """Reads a document batch from disk into PolicyDocument objects."""

    def __init__(self, log_file: Path | None = None) -> None:
        self.logger = setup_logger(self.__class__.__name__, log_file)

    def load(self, path: Path) -> list[PolicyDocument]:
        """Load documents from ``path``.

        Args:
            path: ``.json`` (array of documents) or ``.jsonl`` file.

        Returns:
            Documents in file order.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If a ``.json`` file does not hold an array of objects.
        """
        if not path.exists():
            raise FileNotFoundError(f"Input file not found: {path}")

        if path.suffix == ".jsonl":
            records = self.read_jsonl(path)
        else:
            with open(path, encoding="utf-8") as f:
                records = json.load(f)
            if not isinstance(records, list):
                raise ValueError(f"Expected a JSON array of documents in {path}")

        documents = []
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                self.logger.warning("Skipping document %d in %s: not an object", index, path.name)
                continue
            documents.append(self.parse_document(record))

        self.logger.info("Loaded %d documents from %s", len(documents), path)
        return documents

    def read_jsonl(self, file_path: Path) -> list[dict]:
        """Read JSONL file into list of dictionaries, skipping invalid lines."""
        documents = []
        with open(file_path, encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    documents.append(json.loads(line))
                except json.JSONDecodeError as e:
                    self.logger.warning(
                        "Invalid JSON at %s line %d: %s", file_path.name, line_num, e
                    )
                    continue
        return documents

    def parse_document(self, record: dict[str, Any]) -> PolicyDocument:
        """Decode source payloads in ``record`` and build the document."""
        record = dict(record)
        sources = record.get("sources")
        if not isinstance(sources, list):
            if sources is not None:
                self.logger.warning(
                    "Document %s: 'sources' is not a list, ignoring", record.get("id")
                )
            sources = []

        record["sources"] = [
            self._decode_source(row, record.get("id")) for row in sources if isinstance(row, dict)
        ]
        return PolicyDocument.from_dict(record)

    def _decode_source(self, row: dict[str, Any], document_id: Any) -> dict[str, Any]:
        row = dict(row)
        payload = row.get("specificData")
        if payload is None:
            payload = row.pop("source_specific_data", None)

        if isinstance(payload, str):
            try:
                payload = json.loads(payload) if payload.strip() else None
            except json.JSONDecodeError as e:
                self.logger.warning(
                    "Error parsing source data for order %s (%s): %s",
                    document_id,
                    row.get("source_name"),
                    e,
                )
                payload = None

        row["specificData"] = payload
        return row
