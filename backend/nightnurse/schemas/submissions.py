"""Submission schemas for the public parent, caregiver and newsletter forms.

Every field is cleaned by a ``BeforeValidator`` that trims, checks and
normalizes the raw form value. Checks raise ``PydanticCustomError`` so the
message shown to the visitor is exactly the text below, without pydantic's
"Value error, " prefix.
"""

import re
from typing import Annotated, Any, Callable, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic_core import PydanticCustomError

from backend.nightnurse.core.choices import (
    EXPERIENCE_BUCKETS,
    LOCATIONS,
    SELECTION_DELIMITER,
    START_TIMEFRAMES,
)

NAME_PATTERN = re.compile(r"^[a-zA-Z\s\-']+$")
# Newsletter signups keep the looser pattern the footer form has always used
NEWSLETTER_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[\d\s\-()+.]+$")

MAX_EMAIL_LENGTH = 254


def _invalid(message: str) -> PydanticCustomError:
    return PydanticCustomError("invalid_submission", message)


def _as_text(value: Any) -> str:
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (list, tuple)) and value and isinstance(value[0], str):
        return value[0]
    return ""


def normalize_phone(phone: Optional[str]) -> Optional[str]:
    """Keep digits only and drop a leading US country code from 11-digit numbers."""
    if not phone:
        return None
    digits = re.sub(r"\D", "", phone)
    if len(digits) == 11 and digits.startswith("1"):
        return digits[1:]
    return digits


def _clean_full_name(value: Any) -> str:
    name = _as_text(value).strip()
    if not 2 <= len(name) <= 100:
        raise _invalid("Full name must be between 2 and 100 characters")
    if not NAME_PATTERN.match(name):
        raise _invalid("Full name can only contain letters, spaces, hyphens, and apostrophes")
    return name


def _clean_email(value: Any) -> str:
    email = _as_text(value).strip()
    if len(email) > MAX_EMAIL_LENGTH:
        raise _invalid("Email address is too long")
    try:
        result = validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        raise _invalid("Please provide a valid email address")
    return result.normalized.lower()


def _clean_newsletter_email(value: Any) -> str:
    email = _as_text(value).strip().lower()
    if not NEWSLETTER_EMAIL_PATTERN.match(email):
        raise _invalid("Valid email is required")
    if len(email) > MAX_EMAIL_LENGTH:
        raise _invalid("Email address is too long")
    return email


def _check_phone_format(value: Any) -> str:
    phone = _as_text(value).strip()
    if phone and not PHONE_PATTERN.match(phone):
        raise _invalid("Please provide a valid phone number")
    return phone


def _clean_optional_phone(value: Any) -> Optional[str]:
    return normalize_phone(_check_phone_format(value)) or None


def _clean_required_phone(value: Any) -> str:
    phone = normalize_phone(_check_phone_format(value))
    if not phone:
        raise _invalid("Please provide a valid phone number")
    return phone


def choice_cleaner(choices: tuple, message: str) -> Callable[[Any], str]:
    def clean(value: Any) -> str:
        selected = _as_text(value).strip()
        if selected not in choices:
            raise _invalid(message)
        return selected

    return clean


def length_cleaner(min_length: int, max_length: int, message: str) -> Callable[[Any], str]:
    def clean(value: Any) -> str:
        text = _as_text(value).strip()
        if not min_length <= len(text) <= max_length:
            raise _invalid(message)
        return text

    return clean


def optional_text_cleaner(max_length: int, message: str) -> Callable[[Any], Optional[str]]:
    def clean(value: Any) -> Optional[str]:
        text = _as_text(value).strip()
        if not text:
            return None
        if len(text) > max_length:
            raise _invalid(message)
        return text

    return clean


def selection_cleaner(empty_message: str) -> Callable[[Any], list[str]]:
    def clean(value: Any) -> list[str]:
        if isinstance(value, str):
            raw_items = [value]
        elif isinstance(value, (list, tuple, set)):
            raw_items = [item for item in value if isinstance(item, str)]
        else:
            raw_items = []

        items: list[str] = []
        for item in raw_items:
            item = item.strip()
            if item and item not in items:
                items.append(item)
        if not items:
            raise _invalid(empty_message)
        # Members are stored comma-joined; a comma inside one would not split back out
        if any(SELECTION_DELIMITER in item for item in items):
            raise _invalid("Selections cannot contain commas")
        return items

    return clean


def _clean_honeypot(value: Any) -> str:
    if value is None or value == "":
        return ""
    # Deliberately vague: do not tell bots which field gave them away
    raise _invalid("Invalid submission")


FullName = Annotated[str, BeforeValidator(_clean_full_name)]
Email = Annotated[str, BeforeValidator(_clean_email)]
OptionalPhone = Annotated[Optional[str], BeforeValidator(_clean_optional_phone)]
RequiredPhone = Annotated[str, BeforeValidator(_clean_required_phone)]
Honeypot = Annotated[str, BeforeValidator(_clean_honeypot)]


class SubmissionBase(BaseModel):
    model_config = ConfigDict(extra="ignore", validate_default=True, populate_by_name=True)


class ParentLeadSubmission(SubmissionBase):
    """A parent's request to join the priority list."""

    full_name: FullName = ""
    email: Email = ""
    phone: OptionalPhone = None
    location: Annotated[str, BeforeValidator(choice_cleaner(LOCATIONS, "Please select a valid location"))] = ""
    due_or_age: Annotated[
        str, BeforeValidator(length_cleaner(1, 60, "Please provide due date or child age"))
    ] = ""
    start_timeframe: Annotated[
        str, BeforeValidator(choice_cleaner(START_TIMEFRAMES, "Please select a valid timeframe"))
    ] = ""
    notes: Annotated[
        Optional[str], BeforeValidator(optional_text_cleaner(1000, "Notes must be less than 1000 characters"))
    ] = None
    honeypot: Honeypot = Field(default="", alias="_hp")


class CaregiverApplicationSubmission(SubmissionBase):
    """A caregiver's application to join the network."""

    full_name: FullName = ""
    email: Email = ""
    phone: RequiredPhone = ""
    base_location: Annotated[
        str, BeforeValidator(length_cleaner(2, 120, "Base location must be between 2 and 120 characters"))
    ] = ""
    willing_regions: Annotated[
        list[str], BeforeValidator(selection_cleaner("Please select at least one region you're willing to serve"))
    ] = []
    experience_years: Annotated[
        str, BeforeValidator(choice_cleaner(EXPERIENCE_BUCKETS, "Please select your years of experience"))
    ] = ""
    certifications: Annotated[
        list[str], BeforeValidator(selection_cleaner("Please select at least one certification"))
    ] = []
    availability_notes: Annotated[
        Optional[str],
        BeforeValidator(optional_text_cleaner(280, "Availability notes must be less than 280 characters")),
    ] = None
    experience_summary: Annotated[
        Optional[str],
        BeforeValidator(optional_text_cleaner(600, "Experience summary must be less than 600 characters")),
    ] = None
    honeypot: Honeypot = Field(default="", alias="_hp")


class NewsletterSignup(SubmissionBase):
    email: Annotated[str, BeforeValidator(_clean_newsletter_email)] = ""
    honeypot: Honeypot = Field(default="", alias="_hp")
    # Older newsletter forms named their hidden field "company"
    company: Honeypot = ""
