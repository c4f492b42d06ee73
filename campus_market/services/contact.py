from urllib.parse import quote

import phonenumbers
from phonenumbers import NumberParseException, PhoneNumberFormat

WHATSAPP_BASE_URL = "https://wa.me"


def normalize_phone_number(phone_number: str | None, default_region: str = "IN") -> str | None:
    """Return the number in E.164 form, or None when it cannot be dialled."""
    if not phone_number or not phone_number.strip():
        return None
    try:
        parsed = phonenumbers.parse(phone_number, default_region)
    except NumberParseException:
        return None
    if not phonenumbers.is_possible_number(parsed):
        return None
    return phonenumbers.format_number(parsed, PhoneNumberFormat.E164)


def build_whatsapp_link(
    phone_number: str | None, listing_title: str, default_region: str = "IN"
) -> str | None:
    """
    Build the outbound chat link shown on a listing page.

    Numbers without a country code are taken to be in ``default_region``.
    """
    e164 = normalize_phone_number(phone_number, default_region)
    if e164 is None:
        return None

    message = f"Hello, I'm interested in your listing: {listing_title} on IIIT RKV Campus Market."
    return f"{WHATSAPP_BASE_URL}/{e164.lstrip('+')}?text={quote(message, safe='')}"
