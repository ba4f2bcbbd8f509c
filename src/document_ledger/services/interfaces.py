from abc import ABC, abstractmethod

from document_ledger.domain.documents import Document
from document_ledger.domain.transactions import LedgerEntry, Transaction


class TransactionGenerator(ABC):
    @abstractmethod
    async def generate_transaction(
        self, document: Document
    ) -> tuple[Transaction, list[LedgerEntry]]:
        pass
