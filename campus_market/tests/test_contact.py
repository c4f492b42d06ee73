from urllib.parse import parse_qs, urlparse

import pytest

from campus_market.services.contact import build_whatsapp_link, normalize_phone_number


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("+919876543210", "+919876543210"),
        ("98765 43210", "+919876543210"),
        ("+1 650-253-0000", "+16502530000"),
    ],
)
def test_normalize_phone_number(raw, expected):
    assert normalize_phone_number(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "   ", "not a number", "12"])
def test_unusable_numbers(raw):
    assert normalize_phone_number(raw) is None


def test_whatsapp_link_carries_the_listing_title():
    link = build_whatsapp_link("9876543210", "Lab Coat - Size Medium")

    parsed = urlparse(link)
    assert parsed.netloc == "wa.me"
    assert parsed.path == "/919876543210"
    assert parse_qs(parsed.query)["text"] == [
        "Hello, I'm interested in your listing: Lab Coat - Size Medium on IIIT RKV Campus Market."
    ]


def test_whatsapp_link_escapes_the_message():
    link = build_whatsapp_link("+919876543210", "Books & Notes #1")

    query = link.split("?", 1)[1]
    assert " " not in query
    assert "&" not in query
    assert "#" not in query
    assert parse_qs(urlparse(link).query)["text"][0].endswith("Books & Notes #1 on IIIT RKV Campus Market.")


def test_no_link_without_a_phone_number():
    assert build_whatsapp_link(None, "Wooden Study Table") is None
