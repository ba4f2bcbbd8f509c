from document_ledger.domain.documents import (
    BusinessEntity,
    Document,
    DocumentType,
    Item,
    Line,
    Total,
)
from document_ledger.domain.taxes import (
    GroupMembership,
    Tax,
    TaxAccountingInfo,
    TaxRule,
)
from document_ledger.domain.transactions import LedgerEntry, Transaction
from document_ledger.domain.value_objects import (
    DocumentOperation,
    EntryType,
    GroupType,
    TaxApplicationLevel,
    TaxType,
)

__all__ = [
    "BusinessEntity",
    "Document",
    "DocumentOperation",
    "DocumentType",
    "EntryType",
    "GroupMembership",
    "GroupType",
    "Item",
    "LedgerEntry",
    "Line",
    "Tax",
    "TaxAccountingInfo",
    "TaxApplicationLevel",
    "TaxRule",
    "TaxType",
    "Total",
    "Transaction",
]
