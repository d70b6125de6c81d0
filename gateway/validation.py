"""Field presence and format checks for the customer routes."""
from __future__ import annotations

import re
from typing import Any, Iterable, Optional

import phonenumbers

from .errors import InvalidRequest

CUSTOMER_ROLES = ("Buyer", "Supplier/Vendor")
EMPLOYEE_COUNTS = ("1-10", "11-50", "51-200", "201-500", "501-1000", "1000+")
URL_RE = re.compile(r"^https?://.+\..+")
NUMERIC_ID_RE = re.compile(r"^\d+$")

# Region used to parse national-format phone numbers.
COUNTRY_TO_REGION = {
    "United States": "US",
    "Canada": "CA",
    "United Kingdom": "GB",
    "Germany": "DE",
    "France": "FR",
    "Australia": "AU",
    "Japan": "JP",
    "India": "IN",
    "China": "CN",
    "Brazil": "BR",
    "Mexico": "MX",
    "Other": "US",
}


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def require_fields(payload: dict, names: Iterable[str], *, error: str = "Missing required fields") -> None:
    names = list(names)
    missing = [name for name in names if _blank(payload.get(name))]
    if not missing:
        return
    if len(names) == 1:
        details = f"{names[0]} is a required field"
    elif len(names) == 2:
        details = f"{names[0]} and {names[1]} are required fields"
    else:
        details = f"{', '.join(names[:-1])}, and {names[-1]} are required fields"
    raise InvalidRequest("missing_fields", error, details)


def validate_numeric_id(customer_id: Any) -> str:
    value = str(customer_id)
    if not NUMERIC_ID_RE.match(value):
        raise InvalidRequest("invalid_customer_id", "Invalid customerId", "customerId must be a numeric value")
    return value


def validate_role(role: str) -> None:
    if role not in CUSTOMER_ROLES:
        raise InvalidRequest(
            "invalid_role",
            "Invalid customer role",
            'customer_role must be either "Buyer" or "Supplier/Vendor"',
        )


def validate_website(domain_name: Optional[str]) -> None:
    if domain_name and domain_name.strip() and not URL_RE.match(domain_name.strip()):
        raise InvalidRequest(
            "invalid_url",
            "Invalid website URL",
            "domain_name must be a valid URL starting with http:// or https://",
        )


def validate_employee_count(value: str) -> None:
    if value not in EMPLOYEE_COUNTS:
        raise InvalidRequest(
            "invalid_employee_count",
            "Invalid employee count",
            "number_of_employees must be one of: " + ", ".join(EMPLOYEE_COUNTS),
        )


def format_phone(phone: Any, country: str) -> str:
    """Validate an optional phone number and return it in international format.

    An empty value is accepted and returned as ``""``.
    """
    phone = "" if phone is None else str(phone)
    if not phone.strip():
        return ""
    region = COUNTRY_TO_REGION.get(country, "US")
    try:
        number = phonenumbers.parse(phone, region)
    except phonenumbers.NumberParseException:
        number = None
    if number is None or not phonenumbers.is_valid_number(number):
        raise InvalidRequest("invalid_phone", "Invalid phone number", f"Invalid phone number format for {country}")
    return phonenumbers.format_number(number, phonenumbers.PhoneNumberFormat.INTERNATIONAL)
