"""
Intent Pre-Validation

DESIGN DECISION: The store accepts whatever it is given. Negative costs,
malformed dates and blank names all go through, so nothing the user typed is
ever lost. This validator is ADVISORY: the view layer may run it before
dispatching an add/update intent and show the issues next to the form.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them for human review.
"""

import re
from datetime import date
from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field

from founderstack.models.portfolio import EntityKind
from founderstack.store.transitions import field_name


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'blank', 'invalid_format', 'negative_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """Issues found in one intent's fields."""

    kind: EntityKind
    intent: str = Field(
        default="add",
        pattern="^(add|update)$",
    )
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    def issues_for(self, field: str) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.field == field]


# Name-like field per kind; blank means the record is hard to find again
NAME_FIELDS: dict[EntityKind, tuple[str, ...]] = {
    EntityKind.COMPANY: ("name",),
    EntityKind.ACCOUNT: ("platform",),
    EntityKind.SUBSCRIPTION: ("name",),
    EntityKind.FINANCIAL_CARD: ("name",),
    EntityKind.LOAN: ("name", "lender"),
    EntityKind.INSTITUTION: ("name",),
    EntityKind.DOCUMENT: ("name",),
}

NON_NEGATIVE_FIELDS = (
    "subscription_cost",
    "cost",
    "limit",
    "principal_amount",
    "remaining_balance",
    "interest_rate",
    "monthly_payment",
)

ISO_DATE_FIELDS = (
    "next_billing_date",
    "next_renewal",
    "start_date",
    "upload_date",
)

_EXPIRY = re.compile(r"^(0[1-9]|1[0-2])/\d{2}$")
_LAST4 = re.compile(r"^\d{4}$")


class IntentValidator:
    """
    Checks the fields of an add or update intent.

    Only fields that are present are checked, except that an add with a
    blank name is flagged because the record would get a placeholder name.
    """

    def validate(
        self,
        kind: EntityKind,
        fields: Optional[Mapping[str, Any]] = None,
        intent: str = "add",
    ) -> ValidationResult:
        kind = EntityKind(kind)
        values = self._normalize(kind, fields or {})
        issues: list[ValidationIssue] = []

        issues.extend(self._check_names(kind, values, intent))
        issues.extend(self._check_numbers(values))
        issues.extend(self._check_dates(values))
        issues.extend(self._check_formats(kind, values))
        issues.extend(self._check_semantics(kind, values))

        return ValidationResult(kind=kind, intent=intent, issues=issues)

    @staticmethod
    def _normalize(kind: EntityKind, fields: Mapping[str, Any]) -> dict[str, Any]:
        # Accept both snake_case and the stored camelCase names
        values = {}
        for key, value in fields.items():
            name = field_name(kind, key)
            if name is not None:
                values[name] = value
        return values

    def _check_names(self, kind, values, intent) -> list[ValidationIssue]:
        issues = []
        for name in NAME_FIELDS[kind]:
            if intent == "update" and name not in values:
                continue
            value = values.get(name)
            if value is None or not str(value).strip():
                issues.append(ValidationIssue(
                    field=name,
                    issue_type="blank",
                    message=f"{name.replace('_', ' ').capitalize()} is blank",
                    # An add falls back to a placeholder; an update would store the blank
                    severity="warning" if intent == "add" else "error",
                    suggested_fix=f"Enter a {name.replace('_', ' ')}",
                ))
        return issues

    def _check_numbers(self, values) -> list[ValidationIssue]:
        issues = []
        for name in NON_NEGATIVE_FIELDS:
            value = values.get(name)
            if value is None or value == "":
                continue
            try:
                number = float(value)
            except (TypeError, ValueError):
                issues.append(ValidationIssue(
                    field=name,
                    issue_type="invalid_format",
                    message=f"{value!r} is not a number",
                    severity="error",
                ))
                continue
            if number < 0:
                issues.append(ValidationIssue(
                    field=name,
                    issue_type="negative_value",
                    message=f"{name.replace('_', ' ').capitalize()} cannot be negative",
                    severity="error",
                    suggested_fix="Enter the amount without a minus sign",
                ))

        for position, sub in enumerate(values.get("sub_services") or ()):
            cost = sub.get("cost") if isinstance(sub, Mapping) else getattr(sub, "cost", None)
            if isinstance(cost, (int, float)) and cost < 0:
                issues.append(ValidationIssue(
                    field=f"sub_services[{position}].cost",
                    issue_type="negative_value",
                    message="Add-on cost cannot be negative",
                    severity="error",
                ))
        return issues

    def _check_dates(self, values) -> list[ValidationIssue]:
        issues = []
        for name in ISO_DATE_FIELDS:
            value = values.get(name)
            if not value:
                continue
            try:
                date.fromisoformat(str(value))
            except ValueError:
                issues.append(ValidationIssue(
                    field=name,
                    issue_type="invalid_format",
                    message=f"{value!r} is not a date",
                    severity="error",
                    suggested_fix="Use the YYYY-MM-DD format",
                ))
        return issues

    def _check_formats(self, kind, values) -> list[ValidationIssue]:
        issues = []

        expiry = values.get("expiry")
        if expiry and not _EXPIRY.match(str(expiry)):
            issues.append(ValidationIssue(
                field="expiry",
                issue_type="invalid_format",
                message=f"{expiry!r} is not a valid expiry",
                severity="error",
                suggested_fix="Use the MM/YY format, e.g. 09/27",
            ))

        last4 = values.get("last4")
        if last4 and not _LAST4.match(str(last4)):
            issues.append(ValidationIssue(
                field="last4",
                issue_type="invalid_format",
                message="Last 4 must be exactly four digits",
                severity="error",
            ))

        if kind is EntityKind.INSTITUTION:
            for position, account in enumerate(values.get("accounts") or ()):
                digits = account.get("last4") if isinstance(account, Mapping) else getattr(account, "last4", None)
                if digits and not _LAST4.match(str(digits)):
                    issues.append(ValidationIssue(
                        field=f"accounts[{position}].last4",
                        issue_type="invalid_format",
                        message="Last 4 must be exactly four digits",
                        severity="error",
                    ))

        email = values.get("email")
        if email and "@" not in str(email):
            issues.append(ValidationIssue(
                field="email",
                issue_type="invalid_format",
                message=f"{email!r} does not look like an email address",
                severity="warning",
            ))
        return issues

    def _check_semantics(self, kind, values) -> list[ValidationIssue]:
        issues = []
        if kind is not EntityKind.LOAN:
            return issues

        rate = values.get("interest_rate")
        if isinstance(rate, (int, float)) and rate > 100:
            issues.append(ValidationIssue(
                field="interest_rate",
                issue_type="suspicious_value",
                message=f"Interest rate of {rate}% is unusually high",
                severity="warning",
                suggested_fix="Interest rate is a percentage, e.g. 5.5",
            ))

        principal = values.get("principal_amount")
        remaining = values.get("remaining_balance")
        if (
            isinstance(principal, (int, float))
            and isinstance(remaining, (int, float))
            and remaining > principal
        ):
            issues.append(ValidationIssue(
                field="remaining_balance",
                issue_type="suspicious_value",
                message="Remaining balance is larger than the principal",
                severity="warning",
            ))
        return issues
