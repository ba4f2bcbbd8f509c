"""DocumentTaxCalculator: writes tax totals onto a document and its lines."""

from decimal import Decimal

from document_ledger.config import Settings, get_settings
from document_ledger.domain.documents import Document, Line, Total
from document_ledger.domain.taxes import Tax
from document_ledger.domain.value_objects import (
    SUBTOTAL_CONCEPT,
    round_amount,
    tax_concept,
)
from document_ledger.exceptions import InvalidArgumentError, UnsupportedTaxTypeError
from document_ledger.logging_config import get_logger
from document_ledger.services.tax_accounting import TaxAccountingProfileService
from document_ledger.services.tax_rules import TaxRuleEvaluator

logger = get_logger(__name__)


class DocumentTaxCalculator:
    """Calculates line and document taxes for a single document.

    Totals are derived artifacts: every pass first removes the totals a
    previous pass produced, so calling any calculate method repeatedly on an
    unchanged document leaves the same totals behind. All amounts are worked
    out before the document is touched, so a failing pass never leaves it
    half-updated.

    Callers must invoke recompute() (or the line/document methods) after
    editing quantities, prices, lines or totals; nothing is recomputed
    automatically.
    """

    def __init__(
        self,
        document: Document,
        evaluator: TaxRuleEvaluator,
        *,
        document_type_code: str | None = None,
        accounting_profiles: TaxAccountingProfileService | None = None,
        settings: Settings | None = None,
    ) -> None:
        if document is None:
            raise InvalidArgumentError("document")
        if evaluator is None:
            raise InvalidArgumentError("evaluator")

        settings = settings or get_settings()
        self._document = document
        self._evaluator = evaluator
        self._document_type_code = document_type_code
        self._accounting_profiles = accounting_profiles
        self._rounding_places = settings.tax_rounding_places
        self._strict_tax_types = settings.strict_tax_types

    @property
    def document(self) -> Document:
        return self._document

    def calculate_line_taxes(self, line: Line) -> list[Total]:
        """Replace the tax totals of one line.

        Taxes pre-resolved on the line are used as given (enabled, line-level
        ones only); otherwise the evaluator decides.

        Args:
            line: A line of the calculator's document

        Returns:
            The tax totals that were added to the line

        Raises:
            InvalidArgumentError: If line is None
            UnsupportedTaxTypeError: In strict mode, for a tax of unknown type
        """
        if line is None:
            raise InvalidArgumentError("line")

        if line.taxes:
            taxes = [t for t in line.taxes if t.is_enabled and t.is_line_level]
        else:
            taxes = self._evaluator.get_applicable_line_taxes(
                self._document, line, self._document_type_code
            )

        new_totals = [
            self._tax_total(tax, self._tax_amount(tax, line.amount, line.quantity))
            for tax in taxes
        ]

        removed = line.remove_tax_totals()
        line.totals.extend(new_totals)

        logger.debug(
            "line_taxes_calculated",
            document_id=str(self._document.id),
            line_id=str(line.id),
            removed=removed,
            tax_codes=[t.code for t in taxes],
        )
        return new_totals

    def calculate_document_taxes(self) -> list[Total]:
        """Replace the derived totals of the document.

        Writes, in order: the Subtotal (sum of line amounts), every line total
        concept summed across lines (non-tax concepts first, then taxes), and
        the document-level taxes computed on the subtotal. Any existing
        Subtotal, tax or line aggregate is replaced; other totals added by
        hand are kept.

        Returns:
            The totals that were added to the document

        Raises:
            UnsupportedTaxTypeError: In strict mode, for a tax of unknown type
        """
        document = self._document
        base_amount = document.subtotal
        total_quantity = document.total_quantity

        new_totals = [
            Total(concept=SUBTOTAL_CONCEPT, total=base_amount, is_line_aggregate=True)
        ]
        new_totals.extend(self._aggregate_line_totals(taxes=False))
        new_totals.extend(self._aggregate_line_totals(taxes=True))

        taxes = self._evaluator.get_applicable_document_taxes(
            document, self._document_type_code
        )
        new_totals.extend(
            self._tax_total(tax, self._tax_amount(tax, base_amount, total_quantity))
            for tax in taxes
        )

        removed = document.remove_derived_totals()
        document.totals.extend(new_totals)

        logger.debug(
            "document_taxes_calculated",
            document_id=str(document.id),
            removed=removed,
            subtotal=str(base_amount),
            tax_codes=[t.code for t in taxes],
        )
        return new_totals

    def recompute(self, line: Line | None = None) -> None:
        """Refresh totals after an edit that affects amounts.

        With a line, only that line's taxes are recomputed before the
        document totals are rebuilt; without one, every line is.
        """
        lines = [line] if line is not None else list(self._document.lines)
        for edited in lines:
            self.calculate_line_taxes(edited)
        self.calculate_document_taxes()
        logger.info(
            "document_recomputed",
            document_id=str(self._document.id),
            lines=len(lines),
            totals=len(self._document.totals),
        )

    def _aggregate_line_totals(self, *, taxes: bool) -> list[Total]:
        aggregated: dict[str, Total] = {}
        for line in self._document.lines:
            for line_total in line.totals:
                if line_total.is_tax != taxes:
                    continue
                # Only the document-wide Subtotal is written.
                if not taxes and line_total.is_derived:
                    continue
                existing = aggregated.get(line_total.concept)
                if existing is None:
                    aggregated[line_total.concept] = Total(
                        concept=line_total.concept,
                        total=line_total.total,
                        debit_account_code=line_total.debit_account_code,
                        credit_account_code=line_total.credit_account_code,
                        include_in_transaction=line_total.include_in_transaction,
                        is_line_aggregate=True,
                    )
                else:
                    existing.total += line_total.total
        return list(aggregated.values())

    def _tax_amount(self, tax: Tax, base_amount: Decimal, quantity: Decimal) -> Decimal:
        if not tax.is_supported:
            if self._strict_tax_types:
                raise UnsupportedTaxTypeError(tax.code, tax.tax_type)
            logger.warning(
                "unsupported_tax_type_zero_tax",
                tax_code=tax.code,
                tax_type=str(tax.tax_type),
            )
            return round_amount(Decimal("0"), self._rounding_places)
        return round_amount(tax.calculate(base_amount, quantity), self._rounding_places)

    def _tax_total(self, tax: Tax, amount: Decimal) -> Total:
        total = Total(concept=tax_concept(tax.name, tax.code), total=amount)
        if self._accounting_profiles is not None:
            info = self._accounting_profiles.get(self._document.operation, tax.code)
            if info is not None:
                total.debit_account_code = info.debit_account_code
                total.credit_account_code = info.credit_account_code
                total.include_in_transaction = info.include_in_transaction
        return total
