"""Transaction templates: document-type-keyed recipes for ledger entries."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from document_ledger.domain.documents import Document
from document_ledger.domain.value_objects import EntryType
from document_ledger.exceptions import InvalidArgumentError
from document_ledger.services import amount_calculators as calc
from document_ledger.services.amount_calculators import AmountCalculator

DescriptionGenerator = Callable[[Document], str]


def default_description(document: Document) -> str:
    entity_name = document.business_entity.name if document.business_entity else "Unknown"
    type_code = document.document_type.code if document.document_type else "Unknown"
    return f"{type_code} - {entity_name} - {document.document_date}"


@dataclass
class AccountingTransactionEntry:
    """One side of a templated ledger entry.

    The account key is resolved against an account mapping at generation time
    and the amount calculator is evaluated against the document as it is then.
    """

    account_key: str
    entry_type: EntryType
    amount_calculator: AmountCalculator
    description: str = ""
    account_name_override: str | None = None

    def __post_init__(self) -> None:
        if not self.account_key:
            raise InvalidArgumentError("account_key", "must not be empty")
        if self.amount_calculator is None:
            raise InvalidArgumentError("amount_calculator")

    @classmethod
    def debit(
        cls, account_key: str, amount_calculator: AmountCalculator
    ) -> AccountingTransactionEntry:
        return cls(account_key, EntryType.DEBIT, amount_calculator)

    @classmethod
    def credit(
        cls, account_key: str, amount_calculator: AmountCalculator
    ) -> AccountingTransactionEntry:
        return cls(account_key, EntryType.CREDIT, amount_calculator)

    def with_description(self, description: str) -> AccountingTransactionEntry:
        self.description = description
        return self

    def with_account_name(self, account_name: str) -> AccountingTransactionEntry:
        self.account_name_override = account_name
        return self

    @property
    def account_name(self) -> str:
        return self.account_name_override or self.description or self.account_key


@dataclass
class TransactionTemplate:
    document_type_code: str
    description_generator: DescriptionGenerator = default_description
    entries: list[AccountingTransactionEntry] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.document_type_code:
            raise InvalidArgumentError("document_type_code", "must not be empty")
        if self.description_generator is None:
            self.description_generator = default_description

    def with_entry(self, entry: AccountingTransactionEntry) -> TransactionTemplate:
        self.entries.append(entry)
        return self

    def with_entries(self, *entries: AccountingTransactionEntry) -> TransactionTemplate:
        self.entries.extend(entries)
        return self

    def with_description_generator(
        self, description_generator: DescriptionGenerator
    ) -> TransactionTemplate:
        if description_generator is None:
            raise InvalidArgumentError("description_generator")
        self.description_generator = description_generator
        return self

    def describe(self, document: Document) -> str:
        return self.description_generator(document)


def _entity_name(document: Document, fallback: str) -> str:
    if document.business_entity is None:
        return fallback
    return document.business_entity.name


class TransactionTemplateFactory:
    """Stock templates for the common commercial documents."""

    @staticmethod
    def sales_invoice(
        document_type_code: str = "INV", cost_percentage: int = 60
    ) -> TransactionTemplate:
        cogs = calc.estimated_cost_of_goods_sold(cost_percentage)
        return TransactionTemplate(
            document_type_code,
            lambda d: (
                f"Sales Invoice - {_entity_name(d, 'Unknown Customer')} - {d.document_date}"
            ),
        ).with_entries(
            AccountingTransactionEntry.debit(
                "AccountsReceivable", calc.grand_total
            ).with_account_name("Accounts Receivable"),
            AccountingTransactionEntry.credit(
                "SalesRevenue", calc.subtotal
            ).with_account_name("Sales Revenue"),
            AccountingTransactionEntry.credit(
                "SalesTaxPayable", calc.tax_total
            ).with_account_name("Sales Tax Payable"),
            AccountingTransactionEntry.debit("CostOfGoodsSold", cogs).with_account_name(
                "Cost of Goods Sold"
            ),
            AccountingTransactionEntry.credit("Inventory", cogs).with_account_name(
                "Inventory"
            ),
        )

    @staticmethod
    def purchase_invoice(document_type_code: str = "PO") -> TransactionTemplate:
        return TransactionTemplate(
            document_type_code,
            lambda d: (
                f"Purchase Invoice - {_entity_name(d, 'Unknown Vendor')} - {d.document_date}"
            ),
        ).with_entries(
            AccountingTransactionEntry.debit("Inventory", calc.subtotal).with_account_name(
                "Inventory"
            ),
            AccountingTransactionEntry.debit("InputTax", calc.tax_total).with_account_name(
                "Input Tax Receivable"
            ),
            AccountingTransactionEntry.credit(
                "AccountsPayable", calc.grand_total
            ).with_account_name("Accounts Payable"),
        )

    @staticmethod
    def payment(
        document_type_code: str = "PAY", payment_method: str = "Cash"
    ) -> TransactionTemplate:
        return TransactionTemplate(
            document_type_code,
            lambda d: f"Payment - {_entity_name(d, 'Unknown Entity')} - {d.document_date}",
        ).with_entries(
            AccountingTransactionEntry.debit(
                "AccountsPayable", calc.grand_total
            ).with_account_name("Accounts Payable"),
            AccountingTransactionEntry.credit(
                payment_method, calc.grand_total
            ).with_account_name(payment_method),
        )

    @staticmethod
    def receipt(
        document_type_code: str = "REC", receipt_method: str = "Cash"
    ) -> TransactionTemplate:
        return TransactionTemplate(
            document_type_code,
            lambda d: f"Receipt - {_entity_name(d, 'Unknown Entity')} - {d.document_date}",
        ).with_entries(
            AccountingTransactionEntry.debit(
                receipt_method, calc.grand_total
            ).with_account_name(receipt_method),
            AccountingTransactionEntry.credit(
                "AccountsReceivable", calc.grand_total
            ).with_account_name("Accounts Receivable"),
        )

    @staticmethod
    def expense(
        document_type_code: str,
        expense_account: str,
        expense_account_name: str,
        payment_method: str = "Cash",
    ) -> TransactionTemplate:
        return TransactionTemplate(
            document_type_code,
            lambda d: f"Expense - {_entity_name(d, 'Unknown Entity')} - {d.document_date}",
        ).with_entries(
            AccountingTransactionEntry.debit(
                expense_account, calc.grand_total
            ).with_account_name(expense_account_name),
            AccountingTransactionEntry.credit(
                payment_method, calc.grand_total
            ).with_account_name(payment_method),
        )

    @staticmethod
    def custom(
        document_type_code: str,
        description_generator: DescriptionGenerator | None,
        *entries: AccountingTransactionEntry,
    ) -> TransactionTemplate:
        template = TransactionTemplate(
            document_type_code, description_generator or default_description
        )
        return template.with_entries(*entries)
