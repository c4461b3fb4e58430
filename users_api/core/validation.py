"""
Declarative rule sets for incoming user payloads.

Each field owns an ordered list of predicates. A predicate takes the field
value and returns a message when the value breaks the rule, or None. Every
predicate of every field runs, so the caller gets all violations at once.
"""
import re
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from email_validator import EmailNotValidError, validate_email

from ..schemas.user import UserCreate, UserUpdate


Rule = Callable[[Any], Optional[str]]
RuleSet = Dict[str, List[Rule]]

MINIMUM_AGE = 18
_PHONE_RE = re.compile(r"^\(\d{2}\) \d{5}-\d{4}$")


def normalize_email(email: Optional[str]) -> Optional[str]:
    if email is None:
        return None
    return email.strip().lower()


def age_on(birth_date: date, today: date) -> int:
    before_birthday = (today.month, today.day) < (birth_date.month, birth_date.day)
    return today.year - birth_date.year - int(before_birthday)


# ─────────────────────────────
#   PREDICATES
# ─────────────────────────────

def required(message: str) -> Rule:
    def rule(value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return message
        return None
    return rule


def min_length(size: int, message: str) -> Rule:
    def rule(value):
        if value is not None and len(value) < size:
            return message
        return None
    return rule


def max_length(size: int, message: str) -> Rule:
    def rule(value):
        if value is not None and len(value) > size:
            return message
        return None
    return rule


def matches(pattern: str, message: str) -> Rule:
    compiled = re.compile(pattern)

    def rule(value):
        if value is not None and not compiled.search(value):
            return message
        return None
    return rule


def email_address(message: str) -> Rule:
    def rule(value):
        if value is None:
            return None
        try:
            validate_email(
                value,
                check_deliverability=False,
                globally_deliverable=False,
                test_environment=True,
            )
        except EmailNotValidError:
            return message
        return None
    return rule


def minimum_age(years: int, message: str) -> Rule:
    def rule(value):
        if value is not None and age_on(value, date.today()) < years:
            return message
        return None
    return rule


def phone_format(message: str) -> Rule:
    # Optional field: only checked when something was sent.
    def rule(value):
        if value and not _PHONE_RE.match(value):
            return message
        return None
    return rule


# ─────────────────────────────
#   RULE SETS
# ─────────────────────────────

NAME_RULES = [
    required("Name is required."),
    min_length(3, "Name must have at least 3 characters."),
    max_length(100, "Name must have at most 100 characters."),
]

EMAIL_RULES = [
    required("Email is required."),
    email_address("Email must be a valid address."),
]

PASSWORD_RULES = [
    required("Password is required."),
    min_length(6, "Password must have at least 6 characters."),
    matches(r"[A-Z]", "Password must contain at least one uppercase letter."),
    matches(r"[a-z]", "Password must contain at least one lowercase letter."),
    matches(r"[0-9]", "Password must contain at least one number."),
]

BIRTH_DATE_RULES = [
    required("Birth date is required."),
    minimum_age(MINIMUM_AGE, f"User must be at least {MINIMUM_AGE} years old."),
]

PHONE_RULES = [
    phone_format("Phone must match the format (XX) XXXXX-XXXX."),
]

CREATE_RULES: RuleSet = {
    "name": NAME_RULES,
    "email": EMAIL_RULES,
    "password": PASSWORD_RULES,
    "birth_date": BIRTH_DATE_RULES,
    "phone": PHONE_RULES,
}

# Password is not re-sent on update. Uniqueness of the email against other
# users needs the stored row, so UserService checks it.
UPDATE_RULES: RuleSet = {
    "name": NAME_RULES,
    "email": EMAIL_RULES,
    "birth_date": BIRTH_DATE_RULES,
    "phone": PHONE_RULES,
}


def apply_rules(rules: RuleSet, payload: Any) -> List[str]:
    errors: List[str] = []
    for field, field_rules in rules.items():
        value = getattr(payload, field)
        for rule in field_rules:
            message = rule(value)
            if message is not None:
                errors.append(message)
    return errors


def validate_create(payload: UserCreate) -> List[str]:
    return apply_rules(CREATE_RULES, payload)


def validate_update(payload: UserUpdate) -> List[str]:
    return apply_rules(UPDATE_RULES, payload)
