"""Owned state for one loaded file set.

The session is the single owner of the record set and the lookup map. Both
are only swapped after a parse succeeded, so a failed upload keeps whatever
was loaded before.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from salescore.config import DEFAULT_CONFIG, IngestConfig
from salescore.data import LookupEntry, LookupMap, SaleRecord, ingest_sales, parse_lookup_table, reconcile_records
from salescore.errors import IngestError

logger = logging.getLogger(__name__)


class SalesSession:
    def __init__(self, config: IngestConfig = DEFAULT_CONFIG) -> None:
        self.config = config
        self.records: List[SaleRecord] = []
        self.lookup: LookupMap = {}
        self.source_name: Optional[str] = None

    def replace(self, records: List[SaleRecord], source_name: Optional[str] = None) -> None:
        self.records = list(records)
        self.source_name = source_name
        logger.info("Record set replaced: %d records from %s", len(self.records), source_name or "<memory>")

    def reconcile(self, lookup: Mapping[str, LookupEntry]) -> int:
        self.lookup = dict(lookup)
        updated = reconcile_records(self.records, self.lookup)
        logger.info("Lookup installed (%d stores); %d records re-enriched", len(self.lookup), updated)
        return updated

    def load_sales(self, content: bytes, source_name: Optional[str] = None) -> List[SaleRecord]:
        try:
            records = ingest_sales(content, self.lookup, self.config)
        except IngestError:
            logger.exception("Sales file %s rejected; keeping previous %d records", source_name or "<upload>", len(self.records))
            raise
        self.replace(records, source_name)
        return self.records

    def load_lookup(self, content: bytes) -> int:
        try:
            lookup = parse_lookup_table(content, self.config)
        except IngestError:
            logger.exception("Lookup file rejected; keeping previous map (%d stores)", len(self.lookup))
            raise
        return self.reconcile(lookup)

    def clear(self) -> None:
        self.records = []
        self.lookup = {}
        self.source_name = None
        logger.info("Session cleared")

    def status(self) -> Dict[str, Any]:
        return {
            "records": len(self.records),
            "lookup_entries": len(self.lookup),
            "source": self.source_name,
        }
