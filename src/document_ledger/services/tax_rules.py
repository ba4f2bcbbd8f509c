"""Tax rule evaluation: which taxes apply to a document or one of its lines."""

from collections.abc import Iterable

from document_ledger.domain.documents import Document, Line
from document_ledger.domain.taxes import GroupMembership, Tax, TaxRule
from document_ledger.domain.value_objects import (
    DocumentOperation,
    GroupType,
    TaxApplicationLevel,
)
from document_ledger.exceptions import InvalidArgumentError, InvalidTaxConfigurationError
from document_ledger.logging_config import get_logger
from document_ledger.services.tax_validation import (
    GroupMembershipValidator,
    TaxRuleValidator,
    TaxValidator,
)

logger = get_logger(__name__)


class TaxRuleEvaluator:
    """Resolves applicable taxes from group memberships and prioritized rules.

    For each enabled tax at the requested application level, the rules that
    reference it and match the document scope, the business entity's groups
    and (for lines) the item's groups are ranked by priority. The first rule
    wins: an enabled winner includes the tax, a disabled winner suppresses it.
    A tax with no matching rule is excluded. Results keep the order in which
    taxes were supplied.

    The tax, rule and membership collections are snapshots taken at
    construction and are never modified.

    Attributes:
        strict: When True, definitions are validated at construction and
            InvalidTaxConfigurationError is raised on any problem.
    """

    def __init__(
        self,
        tax_rules: Iterable[TaxRule],
        taxes: Iterable[Tax],
        group_memberships: Iterable[GroupMembership],
        *,
        strict: bool = False,
    ) -> None:
        self._tax_rules = tuple(tax_rules)
        self._taxes = tuple(taxes)
        self._group_memberships = tuple(group_memberships)
        self.strict = strict
        if strict:
            self._validate_definitions()

    @property
    def taxes(self) -> tuple[Tax, ...]:
        return self._taxes

    @property
    def tax_rules(self) -> tuple[TaxRule, ...]:
        return self._tax_rules

    def get_applicable_document_taxes(
        self, document: Document, document_type_code: str | None = None
    ) -> list[Tax]:
        """Get the document-level taxes that apply to a document.

        Args:
            document: The document being taxed
            document_type_code: Overrides the code of the document's type

        Returns:
            Applicable taxes in the order they were supplied

        Raises:
            InvalidArgumentError: If document is None
        """
        if document is None:
            raise InvalidArgumentError("document")

        entity_groups = self._entity_groups(document)
        return self._resolve(
            TaxApplicationLevel.DOCUMENT,
            self._type_code(document, document_type_code),
            document.operation,
            entity_groups,
            item_groups=None,
        )

    def get_applicable_line_taxes(
        self,
        document: Document,
        line: Line,
        document_type_code: str | None = None,
    ) -> list[Tax]:
        """Get the line-level taxes that apply to one line of a document.

        Args:
            document: The document owning the line
            line: The line being taxed
            document_type_code: Overrides the code of the document's type

        Returns:
            Applicable taxes in the order they were supplied

        Raises:
            InvalidArgumentError: If document or line is None
        """
        if document is None:
            raise InvalidArgumentError("document")
        if line is None:
            raise InvalidArgumentError("line")

        entity_groups = self._entity_groups(document)
        item_groups = (
            self.groups_for(line.item.identifiers, GroupType.ITEM)
            if line.item is not None
            else set()
        )
        return self._resolve(
            TaxApplicationLevel.LINE,
            self._type_code(document, document_type_code),
            document.operation,
            entity_groups,
            item_groups=item_groups,
        )

    def groups_for(self, identifiers: set[str], group_type: GroupType) -> set[str]:
        """Get the ids of every group of the given type the entity belongs to."""
        return {
            m.group_id
            for m in self._group_memberships
            if m.group_type == group_type and m.entity_id in identifiers
        }

    def _entity_groups(self, document: Document) -> set[str]:
        if document.business_entity is None:
            return set()
        return self.groups_for(
            document.business_entity.identifiers, GroupType.BUSINESS_ENTITY
        )

    @staticmethod
    def _type_code(document: Document, override: str | None) -> str | None:
        if override:
            return override
        if document.document_type is None:
            return None
        return document.document_type.code

    def _resolve(
        self,
        level: TaxApplicationLevel,
        document_type_code: str | None,
        operation: DocumentOperation | None,
        entity_groups: set[str],
        item_groups: set[str] | None,
    ) -> list[Tax]:
        candidates = [
            rule
            for rule in self._tax_rules
            if rule.matches_scope(document_type_code, operation)
            and (
                not rule.business_entity_group_id
                or rule.business_entity_group_id in entity_groups
            )
            and (
                not rule.item_group_id
                or (item_groups is not None and rule.item_group_id in item_groups)
            )
        ]
        # sorted() is stable, so equal priorities keep their supplied order.
        candidates.sort(key=lambda rule: rule.priority)

        applicable: list[Tax] = []
        for tax in self._taxes:
            if not tax.is_enabled or tax.application_level != level:
                continue
            winner = next((r for r in candidates if r.applies_to_tax(tax)), None)
            if winner is None:
                continue
            if winner.is_enabled:
                applicable.append(tax)
            else:
                logger.debug(
                    "tax_suppressed_by_rule",
                    tax_code=tax.code,
                    rule_id=str(winner.id),
                    priority=winner.priority,
                )

        logger.debug(
            "applicable_taxes_resolved",
            level=level.value,
            document_type_code=document_type_code,
            operation=operation.value if operation else None,
            tax_codes=[t.code for t in applicable],
        )
        return applicable

    def _validate_definitions(self) -> None:
        problems: list[str] = []
        tax_validator = TaxValidator()
        rule_validator = TaxRuleValidator()
        membership_validator = GroupMembershipValidator()

        for tax in self._taxes:
            problems.extend(tax_validator.validate(tax))
        for rule in self._tax_rules:
            problems.extend(rule_validator.validate(rule))
            if rule.tax_code and not any(rule.applies_to_tax(t) for t in self._taxes):
                problems.append(
                    f"tax rule {rule.id}: references unknown tax {rule.tax_code}"
                )
        for membership in self._group_memberships:
            problems.extend(membership_validator.validate(membership))

        if problems:
            logger.warning("tax_configuration_invalid", problems=problems)
            raise InvalidTaxConfigurationError(problems)
