"""
PII (Personally Identifiable Information) masking utilities.
"""
import re


PII_FIELDS = {
    "email", "customer_email", "phone", "customer_phone",
    "name", "customer_name", "delivery_address",
    "customeremail", "customerphone", "customername", "deliveryaddress",
}


def mask_email(email: str) -> str:
    """Mask email address."""
    if "@" not in email:
        return email
    local, domain = email.split("@", 1)
    if len(local) <= 2:
        masked = "**"
    else:
        masked = local[:2] + "*" * (len(local) - 2)
    return f"{masked}@{domain}"


def mask_phone(phone: str) -> str:
    """Mask phone number."""
    if len(phone) <= 4:
        return "*" * len(phone)
    return phone[:2] + "*" * (len(phone) - 4) + phone[-2:]


def mask_name(name: str) -> str:
    """Mask name."""
    if len(name) <= 2:
        return "**"
    return name[0] + "*" * (len(name) - 2) + name[-1]


def mask_card_number(last_four: str | None) -> str | None:
    """Render the last four digits of a card as ``**** 1234``."""
    if not last_four:
        return None
    digits = re.sub(r"\D", "", last_four)[-4:]
    return f"**** {digits}" if digits else None


def mask_pii_in_dict(data: dict) -> dict:
    """Mask PII in dictionary recursively."""
    masked = {}
    for key, value in data.items():
        key_lower = key.lower()

        if isinstance(value, dict):
            masked[key] = mask_pii_in_dict(value)
        elif isinstance(value, list):
            masked[key] = [mask_pii_in_dict(item) if isinstance(item, dict) else item for item in value]
        elif key_lower in PII_FIELDS and isinstance(value, str):
            if "@" in value:
                masked[key] = mask_email(value)
            elif re.match(r'^[\d\s\+\-\(\)]+$', value):
                masked[key] = mask_phone(value)
            else:
                masked[key] = mask_name(value)
        else:
            masked[key] = value

    return masked
