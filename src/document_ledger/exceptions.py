"""Domain exception hierarchy for Document Ledger.

All domain-specific exceptions inherit from DocumentLedgerError.
This allows catching all engine errors with a single base class
while preserving specificity for individual error types.
"""

from decimal import Decimal
from typing import Any


class DocumentLedgerError(Exception):
    """Base exception for all Document Ledger errors.

    All domain exceptions should inherit from this class.
    Includes an error_code for callers that translate errors and extra context.
    """

    error_code: str = "DL_ERROR"

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for callers that report errors."""
        return {
            "error": self.error_code,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(DocumentLedgerError):
    """Base exception for engine configuration errors.

    These are not recoverable at runtime: the template set, account mapping or
    tax definitions handed to the engine must be fixed.
    """

    error_code = "CONFIGURATION_ERROR"


class TemplateNotFoundError(ConfigurationError):
    """Raised when no transaction template is registered for a document type."""

    error_code = "TEMPLATE_NOT_FOUND"

    def __init__(self, document_type_code: str) -> None:
        super().__init__(
            f"No transaction template registered for document type: {document_type_code}",
            context={"document_type_code": document_type_code},
        )
        self.document_type_code = document_type_code


class AccountMappingNotFoundError(ConfigurationError):
    """Raised when an account key cannot be resolved to an account id."""

    error_code = "ACCOUNT_MAPPING_NOT_FOUND"

    def __init__(self, account_key: str) -> None:
        super().__init__(
            f"Account key not found in account mapping: {account_key}",
            context={"account_key": account_key},
        )
        self.account_key = account_key


class InvalidTaxConfigurationError(ConfigurationError):
    """Raised when tax, tax rule or group membership definitions are invalid."""

    error_code = "INVALID_TAX_CONFIGURATION"

    def __init__(self, problems: list[str]) -> None:
        super().__init__(
            "Invalid tax configuration: " + "; ".join(problems),
            context={"problems": list(problems)},
        )
        self.problems = list(problems)


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(DocumentLedgerError):
    """Base exception for validation errors."""

    error_code = "VALIDATION_ERROR"


class UnbalancedTransactionError(ValidationError):
    """Raised when a generated transaction's debits don't equal its credits."""

    error_code = "UNBALANCED_TRANSACTION"

    def __init__(self, debit_total: Decimal, credit_total: Decimal) -> None:
        difference = debit_total - credit_total
        super().__init__(
            f"Transaction is unbalanced: debits={debit_total}, "
            f"credits={credit_total}, difference={difference}",
            context={
                "debit_total": str(debit_total),
                "credit_total": str(credit_total),
                "difference": str(difference),
            },
        )
        self.debit_total = debit_total
        self.credit_total = credit_total
        self.difference = difference


class UnsupportedTaxTypeError(ValidationError):
    """Raised in strict mode when a tax carries a type the engine cannot compute."""

    error_code = "UNSUPPORTED_TAX_TYPE"

    def __init__(self, tax_code: str, tax_type: object) -> None:
        super().__init__(
            f"Unsupported tax type for tax {tax_code}: {tax_type}",
            context={"tax_code": tax_code, "tax_type": str(tax_type)},
        )


class InvalidArgumentError(ValidationError, ValueError):
    """Raised when a required argument is missing or unusable."""

    error_code = "INVALID_ARGUMENT"

    def __init__(self, argument: str, reason: str = "must not be None") -> None:
        super().__init__(
            f"Invalid argument '{argument}': {reason}",
            context={"argument": argument, "reason": reason},
        )
        self.argument = argument
