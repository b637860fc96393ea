"""
Export history.

Newest-first list of InvoiceRecord snapshots. The whole list is loaded when
the store is created and rewritten after every append.
"""
import uuid

from loguru import logger
from pydantic import ValidationError

from ..models.inventory import InventoryItem, InvoiceRecord, RecordStatus
from .storage import StateStoreBase

HISTORY_KEY = "ordersheet_history"


class RecordNotFoundError(KeyError):
    pass


class HistoryStore:
    def __init__(self, store: StateStoreBase):
        self._store = store
        self._records: list[InvoiceRecord] = self._load()

    def _load(self) -> list[InvoiceRecord]:
        raw = self._store.read(HISTORY_KEY, default=[])
        if not isinstance(raw, list):
            logger.error("Stored history is not a list, starting empty")
            return []
        try:
            records = [InvoiceRecord.model_validate(entry) for entry in raw]
        except ValidationError as e:
            logger.error(f"Failed to parse history: {e.error_count()} invalid fields, starting empty")
            return []
        logger.info("Loaded history", records=len(records))
        return records

    def _persist(self) -> None:
        self._store.write(
            HISTORY_KEY,
            [record.model_dump(mode="json", by_alias=True) for record in self._records],
        )

    def append(self, items: list[InventoryItem], status: RecordStatus = RecordStatus.UPLOADED) -> InvoiceRecord:
        """Record a snapshot of ``items``; later edits to the originals do not leak in."""
        snapshot = [item.model_copy(deep=True) for item in items]
        record = InvoiceRecord(
            id=uuid.uuid4().hex,
            items=snapshot,
            total_items=len(snapshot),
            status=status,
        )
        self._records.insert(0, record)
        self._persist()
        logger.info("Recorded export", record_id=record.id, items=record.total_items, status=record.status.value)
        return record

    def list_all(self) -> list[InvoiceRecord]:
        return list(self._records)

    def get(self, record_id: str) -> InvoiceRecord:
        for record in self._records:
            if record.id == record_id:
                return record
        raise RecordNotFoundError(record_id)

    def __len__(self) -> int:
        return len(self._records)
