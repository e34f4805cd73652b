import logging
from abc import ABC, abstractmethod
from typing import Dict

from lettertrust.audit.verification import (
    ProvenanceIntegrityError,
    assert_provenance_integrity,
    verify_provenance,
)
from lettertrust.models.provenance import ProvenanceRecord, ProvenanceVerification

logger = logging.getLogger("lettertrust.storage")


class ProvenanceAlreadyExistsError(ValueError):
    """A letter can carry exactly one provenance record."""


class ProvenanceLedger(ABC):
    """
    Single persistence boundary for provenance records.
    Append-only: records are written once per letter and never updated.
    """

    @abstractmethod
    def commit(self, record: ProvenanceRecord) -> None:
        pass

    @abstractmethod
    def get(self, letter_id: str) -> ProvenanceRecord:
        """
        Return the record for letter_id, re-verified.
        Raises KeyError if absent and ProvenanceIntegrityError if tampered.
        """
        pass

    @abstractmethod
    def verify(self, letter_id: str) -> ProvenanceVerification:
        pass


class InMemoryProvenanceLedger(ProvenanceLedger):
    """
    Process-local ledger. The calling pipeline owns one instance and
    serializes approvals against it.
    """

    def __init__(self):
        self._records: Dict[str, ProvenanceRecord] = {}

    def commit(self, record: ProvenanceRecord) -> None:
        # --- Integrity: one record per letter ---
        if record.letter_id in self._records:
            raise ProvenanceAlreadyExistsError(
                f"Provenance already exists for letter {record.letter_id}"
            )

        # --- Canonical hash verification ---
        assert_provenance_integrity(record)

        # --- Immutable write ---
        self._records[record.letter_id] = record
        logger.info(f"Provenance committed: letter_id={record.letter_id} hash={record.hash}")

    def get(self, letter_id: str) -> ProvenanceRecord:
        if letter_id not in self._records:
            raise KeyError(letter_id)
        record = self._records[letter_id]
        assert_provenance_integrity(record)
        return record

    def verify(self, letter_id: str) -> ProvenanceVerification:
        if letter_id not in self._records:
            raise KeyError(letter_id)
        record = self._records[letter_id]
        return verify_provenance(record.data, record.hash)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, letter_id: str) -> bool:
        return letter_id in self._records


__all__ = [
    "InMemoryProvenanceLedger",
    "ProvenanceAlreadyExistsError",
    "ProvenanceIntegrityError",
    "ProvenanceLedger",
]
