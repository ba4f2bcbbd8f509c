from document_ledger.repositories.interfaces import TransactionRepository
from document_ledger.repositories.memory import InMemoryTransactionRepository

__all__ = ["InMemoryTransactionRepository", "TransactionRepository"]
