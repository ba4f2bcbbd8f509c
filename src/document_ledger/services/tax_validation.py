"""Validators for tax, tax rule and group membership definitions.

Each validator returns a list of human-readable problems; an empty list means
the definition is valid. The evaluator uses them in strict mode to reject bad
rule sets up front instead of silently computing nothing.
"""

from decimal import Decimal

from document_ledger.domain.taxes import GroupMembership, Tax, TaxRule
from document_ledger.domain.value_objects import GroupType, TaxType


class TaxValidator:
    def validate(self, tax: Tax) -> list[str]:
        problems: list[str] = []
        label = tax.code or "<no code>"

        if not tax.code:
            problems.append("tax code is required")
        if not tax.name:
            problems.append(f"tax {label}: name is required")

        if not tax.is_supported:
            problems.append(f"tax {label}: unsupported tax type {tax.tax_type!r}")
        elif tax.tax_type == TaxType.PERCENTAGE:
            if not Decimal("0") <= tax.percentage <= Decimal("100"):
                problems.append(
                    f"tax {label}: percentage must be between 0 and 100, "
                    f"got {tax.percentage}"
                )
        elif tax.amount < 0:
            problems.append(f"tax {label}: amount cannot be negative, got {tax.amount}")

        return problems


class TaxRuleValidator:
    def validate(self, rule: TaxRule) -> list[str]:
        problems: list[str] = []

        if not rule.tax_code:
            problems.append(f"tax rule {rule.id}: tax reference is required")
        if rule.priority < 0:
            problems.append(
                f"tax rule {rule.id}: priority cannot be negative, got {rule.priority}"
            )
        # A rule with no filter at all would apply to every document, entity
        # and item.
        if not rule.has_filter:
            problems.append(
                f"tax rule {rule.id}: at least one of document type, operation, "
                "business entity group or item group is required"
            )

        return problems


class GroupMembershipValidator:
    def validate(self, membership: GroupMembership) -> list[str]:
        problems: list[str] = []

        if not membership.group_id:
            problems.append(f"group membership {membership.id}: group id is required")
        if not membership.entity_id:
            problems.append(f"group membership {membership.id}: entity id is required")
        if not isinstance(membership.group_type, GroupType):
            problems.append(
                f"group membership {membership.id}: unknown group type "
                f"{membership.group_type!r}"
            )

        return problems
