"""Turn raw form payloads into validated submissions or a SubmissionValidationError."""

from typing import Any, Mapping

from pydantic import ValidationError

from backend.nightnurse.core.errors import SubmissionValidationError
from backend.nightnurse.schemas.submissions import (
    CaregiverApplicationSubmission,
    NewsletterSignup,
    ParentLeadSubmission,
)


def combine_names(raw: Mapping[str, Any]) -> dict:
    """Build full_name from first_name/last_name when a form splits them."""
    data = dict(raw)
    first = data.get("first_name")
    last = data.get("last_name")
    if isinstance(first, str) and isinstance(last, str) and first.strip() and last.strip():
        data["full_name"] = f"{first.strip()} {last.strip()}"
    return data


def _field_errors(exc: ValidationError) -> list[dict]:
    errors = []
    for error in exc.errors():
        loc = error.get("loc") or ("body",)
        errors.append({"field": str(loc[0]), "message": error["msg"]})
    return errors


def _validate(model, raw: Mapping[str, Any]):
    try:
        return model.model_validate(combine_names(raw))
    except ValidationError as exc:
        raise SubmissionValidationError(_field_errors(exc)) from None


def validate_parent_lead(raw: Mapping[str, Any]) -> ParentLeadSubmission:
    return _validate(ParentLeadSubmission, raw)


def validate_caregiver_application(raw: Mapping[str, Any]) -> CaregiverApplicationSubmission:
    return _validate(CaregiverApplicationSubmission, raw)


def validate_newsletter_signup(raw: Mapping[str, Any]) -> str:
    """Return the normalized email for a newsletter signup."""
    return _validate(NewsletterSignup, raw).email
