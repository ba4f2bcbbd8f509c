"""Accounting codes for tax totals, per document operation and tax code."""

from document_ledger.domain.taxes import TaxAccountingInfo
from document_ledger.domain.value_objects import DocumentOperation
from document_ledger.exceptions import InvalidArgumentError


class TaxAccountingProfileService:
    """Registry of TaxAccountingInfo keyed by operation and tax code.

    Tax codes are matched case-insensitively. The tax calculator copies the
    registered codes onto the tax totals it writes, which is what lets the
    totals-driven transaction generator post them.
    """

    def __init__(self) -> None:
        self._profiles: dict[DocumentOperation, dict[str, TaxAccountingInfo]] = {}

    def register(
        self, operation: DocumentOperation, tax_code: str, info: TaxAccountingInfo
    ) -> None:
        if not tax_code:
            raise InvalidArgumentError("tax_code", "must not be empty")
        if info is None:
            raise InvalidArgumentError("info")
        self._profiles.setdefault(operation, {})[tax_code.lower()] = info

    def get(
        self, operation: DocumentOperation | None, tax_code: str
    ) -> TaxAccountingInfo | None:
        if not tax_code:
            raise InvalidArgumentError("tax_code", "must not be empty")
        if operation is None:
            return None
        return self._profiles.get(operation, {}).get(tax_code.lower())

    def for_operation(self, operation: DocumentOperation) -> dict[str, TaxAccountingInfo]:
        """Get a copy of every profile registered for an operation."""
        return dict(self._profiles.get(operation, {}))
