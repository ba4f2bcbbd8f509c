from document_ledger.services import amount_calculators
from document_ledger.services.account_mapping import AccountMapping
from document_ledger.services.tax_accounting import TaxAccountingProfileService
from document_ledger.services.tax_calculator import DocumentTaxCalculator
from document_ledger.services.tax_rules import TaxRuleEvaluator
from document_ledger.services.tax_validation import (
    GroupMembershipValidator,
    TaxRuleValidator,
    TaxValidator,
)
from document_ledger.services.templates import (
    AccountingTransactionEntry,
    TransactionTemplate,
    TransactionTemplateFactory,
)
from document_ledger.services.transaction_generator import (
    TemplateTransactionGenerator,
    TotalsTransactionGenerator,
    validate_balance,
)

__all__ = [
    "AccountMapping",
    "AccountingTransactionEntry",
    "DocumentTaxCalculator",
    "GroupMembershipValidator",
    "TaxAccountingProfileService",
    "TaxRuleEvaluator",
    "TaxRuleValidator",
    "TaxValidator",
    "TemplateTransactionGenerator",
    "TotalsTransactionGenerator",
    "TransactionTemplate",
    "TransactionTemplateFactory",
    "amount_calculators",
    "validate_balance",
]
