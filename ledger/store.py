from __future__ import annotations

import logging
from dataclasses import replace
from typing import Union
from uuid import uuid4

from ledger.config import STORAGE_KEY
from ledger.domain import Budget, Snapshot, Transaction
from ledger.errors import NotFoundError, OwnershipError, PersistenceError, ValidationError
from ledger.functional import unwrap, validate_budget, validate_transaction
from ledger.storage import JsonFileSnapshotRepository, SnapshotRepository, storage_key
from ledger.transforms import (
    add_record,
    remove_record,
    replace_record,
    snapshot_from_dict,
    snapshot_to_dict,
    sort_by_date_desc,
)

logger = logging.getLogger(__name__)

Record = Union[Transaction, Budget]


def _check_kind(record) -> None:
    if not isinstance(record, (Transaction, Budget)):
        raise ValidationError(f"Unsupported record type {type(record).__name__}")


class LedgerStore:
    """CRUD surface for a single acting owner.

    Args:
        owner: identity of the acting user; stamped on every created record.
        repository: where snapshots are loaded from and saved to. Defaults to
            JSON files under the configured snapshot directory.
        key_prefix: prefix of the per-owner storage key.
    """

    def __init__(
        self,
        owner: str,
        repository: SnapshotRepository | None = None,
        key_prefix: str = STORAGE_KEY,
    ):
        if not owner:
            raise ValidationError("An acting owner is required")
        self.owner = owner
        self.repository = repository if repository is not None else JsonFileSnapshotRepository()
        self.key = storage_key(owner, key_prefix)
        self._transactions: tuple[Transaction, ...] = ()
        self._budgets: tuple[Budget, ...] = ()
        self.reload()

    # -- reads ---------------------------------------------------------------

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        return self._transactions

    @property
    def budgets(self) -> tuple[Budget, ...]:
        return self._budgets

    def list_all(self) -> Snapshot:
        return Snapshot(transactions=self._transactions, budgets=self._budgets)

    def get(self, record_id: str) -> Record:
        for record in self._transactions + self._budgets:
            if record.id == record_id:
                return record
        raise NotFoundError(f"No record with id {record_id}")

    def reload(self) -> None:
        """Replace in-memory state with what the repository holds."""
        snapshot = self._load()
        self._transactions = snapshot.transactions
        self._budgets = snapshot.budgets
        logger.debug(
            "Loaded %d transactions and %d budgets for %s",
            len(self._transactions), len(self._budgets), self.owner,
        )

    def _load(self) -> Snapshot:
        try:
            payload = self.repository.load(self.key)
            if payload is None:
                return Snapshot()
            snapshot = snapshot_from_dict(payload)
        except PersistenceError as e:
            logger.warning("Starting with an empty ledger for %s: %s", self.owner, e)
            return Snapshot()

        transactions = tuple(t for t in snapshot.transactions if t.owner == self.owner)
        budgets = tuple(b for b in snapshot.budgets if b.owner == self.owner)
        dropped = len(snapshot.transactions) + len(snapshot.budgets) - len(transactions) - len(budgets)
        if dropped:
            logger.warning("Dropped %d records not owned by %s", dropped, self.owner)
        return Snapshot(transactions=self._valid_transactions(transactions),
                        budgets=self._valid_budgets(budgets))

    def _valid_transactions(self, transactions: tuple) -> tuple:
        accepted = []
        for t in transactions:
            result = validate_transaction(t, is_new=False)
            if result.is_left():
                logger.warning("Dropped stored transaction %s: %s", t.id, result.get_error()["message"])
                continue
            accepted.append(t)
        return tuple(accepted)

    def _valid_budgets(self, budgets: tuple) -> tuple:
        # the first budget for a key wins; later duplicates are dropped
        accepted: tuple = ()
        for b in budgets:
            result = validate_budget(b, accepted)
            if result.is_left():
                logger.warning("Dropped stored budget %s: %s", b.id, result.get_error()["message"])
                continue
            accepted = add_record(accepted, b)
        return accepted

    # -- mutations -----------------------------------------------------------

    def create(self, record: Record) -> Record:
        """Store a new record with a fresh id and the acting owner.

        Raises:
            ValidationError: the record breaks a model rule.
            OwnershipError: the draft already names a different owner.
            PersistenceError: the record was stored in memory but not saved.
        """
        _check_kind(record)
        if record.owner is not None and record.owner != self.owner:
            raise OwnershipError(f"Cannot create a record on behalf of {record.owner}")
        stamped = replace(record, id=uuid4().hex, owner=self.owner)

        if isinstance(stamped, Transaction):
            created = unwrap(validate_transaction(stamped, is_new=True))
            self._transactions = sort_by_date_desc(add_record(self._transactions, created))
        else:
            created = unwrap(validate_budget(stamped, self._budgets))
            self._budgets = add_record(self._budgets, created)

        logger.info("Created %s %s for %s", type(created).__name__.lower(), created.id, self.owner)
        self._persist(created)
        return created

    def update(self, record: Record) -> Record:
        """Replace the stored record that has the same id.

        Raises:
            NotFoundError: no record of that kind has this id.
            OwnershipError: the record belongs to another owner.
            ValidationError: the new version breaks a model rule.
            PersistenceError: the update was applied in memory but not saved.
        """
        _check_kind(record)
        if isinstance(record, Transaction):
            self._require(self._transactions, record)
            updated = unwrap(validate_transaction(record, is_new=False))
            self._transactions = sort_by_date_desc(replace_record(self._transactions, updated))
        else:
            self._require(self._budgets, record)
            updated = unwrap(validate_budget(record, self._budgets))
            self._budgets = replace_record(self._budgets, updated)

        logger.info("Updated %s %s", type(updated).__name__.lower(), updated.id)
        self._persist(updated)
        return updated

    def delete(self, record_id: str) -> None:
        """Remove a transaction or budget; unknown ids are ignored."""
        if any(t.id == record_id for t in self._transactions):
            self._transactions = remove_record(self._transactions, record_id)
        elif any(b.id == record_id for b in self._budgets):
            self._budgets = remove_record(self._budgets, record_id)
        else:
            logger.debug("Delete of unknown id %s ignored", record_id)
            return
        logger.info("Deleted %s", record_id)
        self._persist(None)

    def _require(self, records: tuple, record: Record) -> None:
        if not any(r.id == record.id for r in records):
            raise NotFoundError(f"No {type(record).__name__.lower()} with id {record.id}")
        if record.owner != self.owner:
            raise OwnershipError(f"Record {record.id} does not belong to {self.owner}")

    def _persist(self, record) -> None:
        try:
            self.repository.save(self.key, snapshot_to_dict(self.list_all()))
        except PersistenceError as e:
            # the in-memory change stays; only durability is lost
            logger.error("Could not save ledger for %s: %s", self.owner, e)
            raise PersistenceError(str(e), record=record) from e
