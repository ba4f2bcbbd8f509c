"""In-memory transaction store for tests and embedding without a database."""

from collections.abc import Iterable
from uuid import UUID

from document_ledger.domain.transactions import LedgerEntry, Transaction
from document_ledger.exceptions import InvalidArgumentError
from document_ledger.repositories.interfaces import TransactionRepository


class InMemoryTransactionRepository(TransactionRepository):
    def __init__(self) -> None:
        self._transactions: dict[UUID, Transaction] = {}
        self._entries: dict[UUID, list[LedgerEntry]] = {}

    def add(self, transaction: Transaction, entries: Iterable[LedgerEntry]) -> None:
        if transaction.id in self._transactions:
            raise InvalidArgumentError(
                "transaction", f"transaction {transaction.id} is already stored"
            )
        self._transactions[transaction.id] = transaction
        self._entries[transaction.id] = list(entries)

    def get(self, transaction_id: UUID) -> Transaction | None:
        return self._transactions.get(transaction_id)

    def get_entries(self, transaction_id: UUID) -> list[LedgerEntry]:
        return list(self._entries.get(transaction_id, []))

    def list_by_document(self, document_id: UUID) -> Iterable[Transaction]:
        return [t for t in self._transactions.values() if t.document_id == document_id]

    def __len__(self) -> int:
        return len(self._transactions)
