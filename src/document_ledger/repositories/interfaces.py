from abc import ABC, abstractmethod
from collections.abc import Iterable
from uuid import UUID

from document_ledger.domain.transactions import LedgerEntry, Transaction


class TransactionRepository(ABC):
    @abstractmethod
    def add(self, transaction: Transaction, entries: Iterable[LedgerEntry]) -> None:
        pass

    @abstractmethod
    def get(self, transaction_id: UUID) -> Transaction | None:
        pass

    @abstractmethod
    def get_entries(self, transaction_id: UUID) -> list[LedgerEntry]:
        pass

    @abstractmethod
    def list_by_document(self, document_id: UUID) -> Iterable[Transaction]:
        pass
