from decimal import Decimal

import pytest

from document_ledger.config import Environment, Settings
from document_ledger.domain.documents import Line, Total
from document_ledger.domain.taxes import Tax, TaxAccountingInfo, TaxRule
from document_ledger.domain.value_objects import (
    SUBTOTAL_CONCEPT,
    DocumentOperation,
    TaxApplicationLevel,
    TaxType,
)
from document_ledger.exceptions import InvalidArgumentError, UnsupportedTaxTypeError
from document_ledger.services import amount_calculators as calc
from document_ledger.services.tax_accounting import TaxAccountingProfileService
from document_ledger.services.tax_calculator import DocumentTaxCalculator
from document_ledger.services.tax_rules import TaxRuleEvaluator

IVA_CONCEPT = "Tax: IVA (IVA)"


def _totals_by_concept(totals: list[Total]) -> dict[str, Decimal]:
    return {t.concept: t.total for t in totals}


@pytest.fixture
def calculator(invoice, evaluator, settings) -> DocumentTaxCalculator:
    return DocumentTaxCalculator(invoice, evaluator, settings=settings)


class TestLineTaxes:
    def test_percentage_tax_on_line(self, invoice, evaluator, settings, standard_product):
        line = invoice.add_line(Line(item=standard_product, quantity=2, unit_price=100))
        calculator = DocumentTaxCalculator(invoice, evaluator, settings=settings)

        added = calculator.calculate_line_taxes(line)

        assert len(added) == 1
        assert added[0].concept == IVA_CONCEPT
        assert added[0].total == Decimal("26.00")
        assert line.tax_totals == added

    def test_tax_rounded_half_up(self, calculator, invoice):
        line = invoice.lines[1]

        added = calculator.calculate_line_taxes(line)

        # 151 x 13% = 19.63
        assert added[0].total == Decimal("19.63")

    def test_rounding_half_up_on_exact_half_cent(self, invoice, settings):
        tax = Tax(code="HALF", name="Half", percentage=Decimal("0.5"))
        line = invoice.add_line(Line(quantity=1, unit_price=Decimal("1.01")))
        line.taxes.append(tax)
        calculator = DocumentTaxCalculator(
            invoice, TaxRuleEvaluator([], [], []), settings=settings
        )

        added = calculator.calculate_line_taxes(line)

        # 1.01 x 0.5% = 0.00505
        assert added[0].total == Decimal("0.01")

    def test_repeated_calculation_is_idempotent(self, calculator, invoice):
        line = invoice.lines[0]

        calculator.calculate_line_taxes(line)
        calculator.calculate_line_taxes(line)
        calculator.calculate_line_taxes(line)

        assert len(line.tax_totals) == 1
        assert line.tax_totals[0].total == Decimal("39.00")

    def test_tax_totals_recognised_case_insensitively(self, calculator, invoice):
        line = invoice.lines[0]
        line.totals.append(Total(concept="TAX: stale", total=Decimal("5")))
        line.totals.append(Total(concept="Freight", total=Decimal("7")))

        calculator.calculate_line_taxes(line)

        concepts = [t.concept for t in line.totals]
        assert "TAX: stale" not in concepts
        assert "Freight" in concepts
        assert IVA_CONCEPT in concepts

    def test_exempt_item_gets_no_tax(self, calculator, invoice, exempt_product):
        line = invoice.add_line(Line(item=exempt_product, quantity=2, unit_price=50))

        assert calculator.calculate_line_taxes(line) == []
        assert line.tax_totals == []

    def test_fixed_amount_tax_ignores_quantity(self, invoice, settings):
        stamp = Tax(code="STAMP", name="Stamp", tax_type=TaxType.FIXED_AMOUNT, amount=2)
        line = invoice.add_line(Line(quantity=5, unit_price=10, taxes=[stamp]))
        calculator = DocumentTaxCalculator(
            invoice, TaxRuleEvaluator([], [], []), settings=settings
        )

        added = calculator.calculate_line_taxes(line)

        assert added[0].total == Decimal("2.00")

    def test_amount_per_unit_tax_multiplies_quantity(self, invoice, settings):
        fuel = Tax(
            code="FOV", name="Fuel Levy", tax_type=TaxType.AMOUNT_PER_UNIT, amount="0.20"
        )
        line = invoice.add_line(Line(quantity=15, unit_price=4, taxes=[fuel]))
        calculator = DocumentTaxCalculator(
            invoice, TaxRuleEvaluator([], [], []), settings=settings
        )

        added = calculator.calculate_line_taxes(line)

        assert added[0].total == Decimal("3.00")

    def test_pre_resolved_taxes_skip_disabled_and_document_level(
        self, invoice, evaluator, settings, iva
    ):
        disabled = Tax(code="OFF", name="Off", percentage=5, is_enabled=False)
        doc_level = Tax(
            code="RET",
            name="Retention",
            percentage=1,
            application_level=TaxApplicationLevel.DOCUMENT,
        )
        line = invoice.add_line(
            Line(quantity=1, unit_price=100, taxes=[iva, disabled, doc_level])
        )
        calculator = DocumentTaxCalculator(invoice, evaluator, settings=settings)

        added = calculator.calculate_line_taxes(line)

        assert [t.concept for t in added] == [IVA_CONCEPT]

    def test_none_line_rejected(self, calculator):
        with pytest.raises(InvalidArgumentError):
            calculator.calculate_line_taxes(None)


class TestDocumentTaxes:
    def test_recompute_aggregates_line_taxes(self, calculator, invoice):
        calculator.recompute()

        totals = _totals_by_concept(invoice.totals)
        assert totals[SUBTOTAL_CONCEPT] == Decimal("451")
        assert totals[IVA_CONCEPT] == Decimal("58.63")
        assert calc.subtotal(invoice) == Decimal("451")
        assert calc.tax_total(invoice) == Decimal("58.63")
        assert calc.grand_total(invoice) == Decimal("509.63")

    def test_subtotal_written_first(self, calculator, invoice):
        calculator.recompute()

        assert invoice.totals[0].concept == SUBTOTAL_CONCEPT
        assert invoice.totals[0].is_line_aggregate

    def test_recompute_is_idempotent(self, calculator, invoice):
        calculator.recompute()
        first = [(t.concept, t.total) for t in invoice.totals]

        calculator.recompute()
        calculator.recompute()

        assert [(t.concept, t.total) for t in invoice.totals] == first
        for line in invoice.lines:
            assert len(line.tax_totals) == 1

    def test_manual_totals_survive_recalculation(self, calculator, invoice):
        invoice.add_total(Total(concept="Freight", total=Decimal("12.50")))

        calculator.recompute()
        calculator.recompute()

        freight = [t for t in invoice.totals if t.concept == "Freight"]
        assert len(freight) == 1
        assert freight[0].total == Decimal("12.50")

    def test_entered_subtotal_replaced_not_doubled(self, calculator, invoice):
        invoice.add_total(Total(concept="Subtotal", total=Decimal("451")))

        calculator.recompute()
        calculator.recompute()

        subtotals = [t for t in invoice.totals if t.concept == SUBTOTAL_CONCEPT]
        assert len(subtotals) == 1
        assert calc.subtotal(invoice) == Decimal("451")
        assert calc.grand_total(invoice) == Decimal("509.63")

    def test_line_subtotal_not_aggregated(self, calculator, invoice):
        invoice.lines[0].totals.append(Total(concept="subtotal", total=Decimal("400")))

        calculator.recompute()

        assert [t.concept for t in invoice.totals] == [SUBTOTAL_CONCEPT, IVA_CONCEPT]
        assert calc.subtotal(invoice) == Decimal("451")

    def test_non_tax_line_totals_aggregated_before_taxes(self, calculator, invoice):
        for line in invoice.lines:
            line.totals.append(Total(concept="Discount", total=Decimal("5")))

        calculator.recompute()

        concepts = [t.concept for t in invoice.totals]
        assert concepts == [SUBTOTAL_CONCEPT, "Discount", IVA_CONCEPT]
        assert _totals_by_concept(invoice.totals)["Discount"] == Decimal("10")

    def test_recompute_single_edited_line(self, calculator, invoice):
        calculator.recompute()

        invoice.lines[0].quantity = Decimal("1")
        calculator.recompute(invoice.lines[0])

        totals = _totals_by_concept(invoice.totals)
        assert totals[SUBTOTAL_CONCEPT] == Decimal("251")
        assert totals[IVA_CONCEPT] == Decimal("32.63")

    def test_document_level_percentage_on_subtotal(self, invoice, settings):
        retention = Tax(
            code="RET",
            name="Retention",
            percentage=1,
            application_level=TaxApplicationLevel.DOCUMENT,
        )
        evaluator = TaxRuleEvaluator(
            [TaxRule(tax_code="RET", document_operation=DocumentOperation.SALES_INVOICE)],
            [retention],
            [],
        )
        calculator = DocumentTaxCalculator(invoice, evaluator, settings=settings)

        added = calculator.calculate_document_taxes()

        assert _totals_by_concept(added)["Tax: Retention (RET)"] == Decimal("4.51")

    def test_document_level_per_unit_on_total_quantity(self, invoice, settings):
        levy = Tax(
            code="LVY",
            name="Levy",
            tax_type=TaxType.AMOUNT_PER_UNIT,
            amount=Decimal("0.50"),
            application_level=TaxApplicationLevel.DOCUMENT,
        )
        evaluator = TaxRuleEvaluator(
            [TaxRule(tax_code="LVY", document_type_code="INV")], [levy], []
        )
        calculator = DocumentTaxCalculator(invoice, evaluator, settings=settings)

        added = calculator.calculate_document_taxes()

        # 4 units in total
        assert _totals_by_concept(added)["Tax: Levy (LVY)"] == Decimal("2.00")

    def test_explicit_document_type_code_used_for_rules(self, invoice, settings, iva):
        evaluator = TaxRuleEvaluator(
            [TaxRule(tax_code="IVA", document_type_code="CCF")], [iva], []
        )
        calculator = DocumentTaxCalculator(
            invoice, evaluator, document_type_code="CCF", settings=settings
        )

        calculator.recompute()

        assert calc.tax_total(invoice) == Decimal("58.63")


class TestUnsupportedTaxTypes:
    def test_unknown_type_degrades_to_zero(self, invoice, settings):
        odd = Tax(code="ODD", name="Odd", tax_type="compound", percentage=10)
        line = invoice.add_line(Line(quantity=1, unit_price=100, taxes=[odd]))
        calculator = DocumentTaxCalculator(
            invoice, TaxRuleEvaluator([], [], []), settings=settings
        )

        added = calculator.calculate_line_taxes(line)

        assert added[0].total == Decimal("0.00")

    def test_unknown_type_raises_in_strict_mode(self, invoice):
        strict = Settings(environment=Environment.TESTING, strict_tax_types=True)
        odd = Tax(code="ODD", name="Odd", tax_type="compound", percentage=10)
        line = invoice.add_line(Line(quantity=1, unit_price=100, taxes=[odd]))
        line.totals.append(Total(concept="Tax: previous", total=Decimal("1")))
        calculator = DocumentTaxCalculator(
            invoice, TaxRuleEvaluator([], [], []), settings=strict
        )

        with pytest.raises(UnsupportedTaxTypeError):
            calculator.calculate_line_taxes(line)

        # A failed pass leaves the line untouched.
        assert [t.concept for t in line.totals] == ["Tax: previous"]


class TestAccountingProfiles:
    def test_profile_codes_copied_onto_tax_totals(self, invoice, evaluator, settings):
        profiles = TaxAccountingProfileService()
        profiles.register(
            DocumentOperation.SALES_INVOICE,
            "IVA",
            TaxAccountingInfo(
                debit_account_code="AccountsReceivable",
                credit_account_code="SalesTaxPayable",
            ),
        )
        calculator = DocumentTaxCalculator(
            invoice, evaluator, accounting_profiles=profiles, settings=settings
        )

        calculator.recompute()

        tax_total = invoice.tax_totals[0]
        assert tax_total.debit_account_code == "AccountsReceivable"
        assert tax_total.credit_account_code == "SalesTaxPayable"
        assert tax_total.include_in_transaction is True

    def test_no_profile_leaves_codes_empty(self, calculator, invoice):
        calculator.recompute()

        tax_total = invoice.tax_totals[0]
        assert tax_total.debit_account_code is None
        assert not tax_total.has_account_codes


class TestConstruction:
    def test_requires_document(self, evaluator, settings):
        with pytest.raises(InvalidArgumentError) as exc:
            DocumentTaxCalculator(None, evaluator, settings=settings)

        assert exc.value.argument == "document"

    def test_requires_evaluator(self, invoice, settings):
        with pytest.raises(InvalidArgumentError) as exc:
            DocumentTaxCalculator(invoice, None, settings=settings)

        assert exc.value.argument == "evaluator"

    def test_rounding_places_from_settings(self, invoice, evaluator):
        settings = Settings(environment=Environment.TESTING, tax_rounding_places=0)
        calculator = DocumentTaxCalculator(invoice, evaluator, settings=settings)

        added = calculator.calculate_line_taxes(invoice.lines[1])

        assert added[0].total == Decimal("20")
