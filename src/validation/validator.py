"""
Request Validation

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Type checking, required field presence, format validation
- Delegated to the pydantic input schemas

STAGE 2 - SEMANTIC VALIDATION:
- Cross-field rules (e.g. a report range must not run backwards)

Both stages report through the same ValidationError carrying one issue
per offending field. Validation NEVER silently fixes input.
"""

from datetime import date
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from src.errors import ValidationError
from src.models.ledger import (
    CREATE_SCHEMAS,
    UPDATE_SCHEMAS,
    BudgetCreate,
    BudgetUpdate,
    EntryKind,
    ReportRequest,
    ValidationIssue,
)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

_ISSUE_TYPES = {
    "missing": "missing",
    "extra_forbidden": "unknown_field",
    "enum": "invalid_choice",
    "literal_error": "invalid_choice",
}


def _issues_from_schema_error(error: SchemaError) -> list[ValidationIssue]:
    issues = []
    for detail in error.errors():
        field = ".".join(str(part) for part in detail["loc"]) or "__root__"
        issues.append(ValidationIssue(
            field=field,
            issue_type=_ISSUE_TYPES.get(detail["type"], "invalid_value"),
            message=detail["msg"],
        ))
    return issues


def parse_payload(schema: type[SchemaT], payload: Any) -> SchemaT:
    """
    Stage 1: Validate a raw payload against an input schema.

    Raises:
        ValidationError: With one issue per failing field
    """
    if isinstance(payload, schema):
        return payload
    if not isinstance(payload, dict):
        raise ValidationError([
            ValidationIssue(
                field="__root__",
                issue_type="invalid_value",
                message="Request body must be an object",
            )
        ])
    try:
        return schema.model_validate(payload)
    except SchemaError as e:
        raise ValidationError(_issues_from_schema_error(e))


class LedgerValidator:
    """
    Validates caller input for ledger, budget and report operations.
    """

    def entry_create(self, kind: EntryKind, payload: Any) -> BaseModel:
        return parse_payload(CREATE_SCHEMAS[kind], payload)

    def entry_update(self, kind: EntryKind, payload: Any) -> BaseModel:
        return parse_payload(UPDATE_SCHEMAS[kind], payload)

    def budget_create(self, payload: Any) -> BudgetCreate:
        return parse_payload(BudgetCreate, payload)

    def budget_update(self, payload: Any) -> BudgetUpdate:
        return parse_payload(BudgetUpdate, payload)

    def report_request(self, report_type: Any, start_date: Any, end_date: Any) -> ReportRequest:
        """
        Both stages for a report pull.

        Stage 2 rejects a range whose start is after its end.
        """
        request = parse_payload(
            ReportRequest,
            {"report_type": report_type, "start_date": start_date, "end_date": end_date},
        )
        self._check_range(request.start_date, request.end_date)
        return request

    def _check_range(self, start_date: date, end_date: date) -> None:
        if start_date > end_date:
            raise ValidationError([
                ValidationIssue(
                    field="start_date",
                    issue_type="invalid_range",
                    message="Start date must be on or before end date",
                )
            ])
