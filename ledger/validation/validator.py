"""
Boundary Validation

DESIGN DECISION: The engine accepts whatever it is given.
Forms and other entry points run these checks BEFORE calling it:

- amounts typed by the user are coerced with parse_amount()
- new transactions need a positive amount and an existing account
- budgets must be positive
- a payback may not exceed what the checking account holds, nor what
  the credit account owes

IMPORTANT: Validation never fixes input.
It reports issues for the user to correct.
"""

from decimal import Decimal, InvalidOperation
from typing import Optional, Union
from uuid import UUID

from ledger.engine import LedgerEngine
from ledger.models.entities import AccountType
from ledger.models.validation import ValidationIssue, ValidationResult


ZERO = Decimal("0")


def parse_amount(
    text: Union[str, int, float, Decimal, None],
    default: Decimal = ZERO,
) -> Decimal:
    """
    Coerce user input to a Decimal amount.

    Unparseable, empty and non-finite input yields the default.
    Thousands separators and surrounding whitespace are tolerated.
    """
    if text is None:
        return default
    if isinstance(text, Decimal):
        value = text
    else:
        cleaned = str(text).strip().replace(",", "")
        if not cleaned:
            return default
        try:
            value = Decimal(cleaned)
        except InvalidOperation:
            return default
    if not value.is_finite():
        return default
    return value


class LedgerValidator:
    """
    Validates user input against the current ledger state.

    Needs the engine for balance, due and reference lookups.
    """

    def __init__(self, engine: LedgerEngine):
        self._engine = engine

    def _amount_issues(self, amount: Decimal) -> list[ValidationIssue]:
        if amount <= ZERO:
            return [ValidationIssue(
                field="amount",
                issue_type="not_positive",
                message="Amount must be greater than zero",
                severity="error",
                suggested_fix="Enter an amount above zero",
            )]
        return []

    def validate_transaction(
        self,
        amount: Decimal,
        account_id: Optional[UUID],
        category_id: Optional[UUID] = None,
    ) -> ValidationResult:
        """Checks for a new or edited regular transaction."""
        issues = self._amount_issues(amount)

        if account_id is None:
            issues.append(ValidationIssue(
                field="account_id",
                issue_type="missing",
                message="An account is required",
                severity="error",
                suggested_fix="Create an account first",
            ))
        elif self._engine.get_account(account_id) is None:
            issues.append(ValidationIssue(
                field="account_id",
                issue_type="not_found",
                message="The selected account no longer exists",
                severity="error",
                suggested_fix="Pick another account",
            ))

        if category_id is not None and self._engine.get_category(category_id) is None:
            issues.append(ValidationIssue(
                field="category_id",
                issue_type="not_found",
                message="The selected category no longer exists",
                severity="error",
                suggested_fix="Pick another category",
            ))

        return ValidationResult.from_issues(issues)

    def validate_budget(self, amount: Decimal) -> ValidationResult:
        """A budget must be a positive amount."""
        issues = self._amount_issues(amount)
        return ValidationResult.from_issues(issues)

    def validate_payback(
        self,
        amount: Decimal,
        from_checking_id: Optional[UUID],
        to_credit_id: Optional[UUID],
    ) -> ValidationResult:
        """
        You cannot pay back more than you owe or more than you have.

        Available funds are the checking balance floored at zero.
        """
        issues = self._amount_issues(amount)

        checking = self._engine.get_account(from_checking_id)
        credit = self._engine.get_account(to_credit_id)

        if checking is None or checking.type is not AccountType.CHECKING:
            issues.append(ValidationIssue(
                field="from_checking_id",
                issue_type="invalid_account",
                message="Pay from must be an existing checking account",
                severity="error",
            ))
        if credit is None or credit.type is not AccountType.CREDIT:
            issues.append(ValidationIssue(
                field="to_credit_id",
                issue_type="invalid_account",
                message="Pay to must be an existing credit account",
                severity="error",
            ))

        if checking is not None and checking.type is AccountType.CHECKING:
            available = max(ZERO, self._engine.balance_for_account(checking.id))
            if amount > available:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="exceeds_available",
                    message=f"Amount exceeds available balance ({available})",
                    severity="error",
                    suggested_fix=f"Pay at most {available}",
                ))

        if credit is not None and credit.type is AccountType.CREDIT:
            due = self._engine.due_amount_for_credit_account(credit.id)
            if amount > due:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="exceeds_due",
                    message=f"Amount exceeds amount owed ({due})",
                    severity="error",
                    suggested_fix=f"Pay at most {due}",
                ))

        return ValidationResult.from_issues(issues)

    def max_payback(self, from_checking_id: UUID, to_credit_id: UUID) -> Decimal:
        """The largest amount validate_payback would accept."""
        available = max(ZERO, self._engine.balance_for_account(from_checking_id))
        due = self._engine.due_amount_for_credit_account(to_credit_id)
        return min(available, due)

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """One line per issue, errors first."""
        if result.is_valid and not result.warnings:
            return "All checks passed."

        lines = []
        for issue in result.issues:
            if issue.severity == "error":
                lines.append(f"• {issue.message}")
                if issue.suggested_fix:
                    lines.append(f"  {issue.suggested_fix}")
        for warning in result.warnings:
            lines.append(f"• {warning}")
        return "\n".join(lines)
