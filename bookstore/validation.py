"""Form validation helpers."""
import re
from typing import Dict, Optional, Union

Number = Union[int, float]

# Field name -> message
FormErrors = Dict[str, str]

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def validate_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email))


def validate_required(value: Optional[str]) -> bool:
    return value is not None and len(value.strip()) > 0


def validate_min_length(value: str, min_length: int) -> bool:
    return len(value) >= min_length


def validate_positive_number(value: Number) -> bool:
    return value > 0


def validate_non_negative_number(value: Number) -> bool:
    return value >= 0


def validate_book_form(
    title: Optional[str],
    author: Optional[str],
    price: Optional[Number] = None,
    stock: Optional[Number] = None
) -> FormErrors:
    """
    Validate book fields before submission.

    Returns:
        Field-scoped error messages (empty when valid)
    """
    errors: FormErrors = {}

    if not validate_required(title):
        errors["title"] = "Title is required"

    if not validate_required(author):
        errors["author"] = "Author is required"

    if price is not None and not validate_non_negative_number(price):
        errors["price"] = "Price must be a non-negative number"

    if stock is not None and (
        not float(stock).is_integer() or not validate_non_negative_number(stock)
    ):
        errors["stock"] = "Stock must be a non-negative number"

    return errors


def validate_customer_form(name: Optional[str], email: Optional[str] = None) -> FormErrors:
    """Validate customer fields; email is optional but must look like one."""
    errors: FormErrors = {}

    if not validate_required(name):
        errors["name"] = "Name is required"

    if email and not validate_email(email):
        errors["email"] = "Please enter a valid email address"

    return errors
