from cleanchoice.models.brand import ClaimTier
from cleanchoice.services.crawl.classifier import (
    classify_claim,
    extract_origins,
    find_claim_snippet,
    find_zip_fragment,
    has_domestic_address,
    is_us_origin,
)

import pytest


def test_domestic_address_from_state_zip():
    assert has_domestic_address("Visit our shop in San Francisco, CA 94107 today", []) is True
    assert has_domestic_address("Ship to NY 10001-1234", []) is True


def test_domestic_address_negative():
    assert has_domestic_address("Made in France", []) is False
    assert has_domestic_address("Order 12345 shipped", []) is False


def test_domestic_address_country_token_needs_contact_word():
    assert has_domestic_address("Proudly serving the United States", []) is False
    assert has_domestic_address("Proudly serving the United States. Contact us anytime.", []) is True
    assert has_domestic_address("USA office. Phone: 555-0100", []) is True
    # case-sensitive country token
    assert has_domestic_address("usa address", []) is False


def test_domestic_address_from_structured_country_field():
    structured = [{"@type": "Organization", "address": {"@type": "PostalAddress", "addressCountry": "us"}}]
    assert has_domestic_address("", structured) is True
    nested = [{"location": [{"address": {"addressCountry": {"@type": "Country", "name": "United States"}}}]}]
    assert has_domestic_address("", nested) is True


def test_domestic_address_ignores_incidental_structured_text():
    structured = [{"description": "We ship to the US", "addressCountry": "CA"}]
    assert has_domestic_address("", structured) is False


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Made in USA", ClaimTier.unqualified),
        ("Proudly made in the U.S.A.", ClaimTier.unqualified),
        ("All boots are manufactured in USA.", ClaimTier.unqualified),
        ("Made in USA with imported materials", ClaimTier.qualified),
        ("Made in USA with imported parts", ClaimTier.qualified),
        ("Assembled in USA from global parts", ClaimTier.qualified),
        ("Proudly Canadian", ClaimTier.none),
        ("", ClaimTier.none),
    ],
)
def test_classify_claim(text, expected):
    assert classify_claim(text) is expected


def test_classify_claim_disqualifier_order_does_not_matter():
    a = "Our mugs are Made in USA. Our lids are assembled in USA."
    b = "Our lids are assembled in USA. Our mugs are Made in USA."
    assert classify_claim(a) is ClaimTier.qualified
    assert classify_claim(b) is ClaimTier.qualified

    c = "Made in USA. Sold with imported parts kits."
    d = "Sold with imported parts kits. Made in USA."
    assert classify_claim(c) is not ClaimTier.unqualified
    assert classify_claim(d) is not ClaimTier.unqualified


def test_find_claim_snippet_window():
    text = "x" * 200 + " Made in the U.S.A. " + "y" * 200
    snippet = find_claim_snippet(text)
    assert "Made in the U.S.A." in snippet
    assert len(snippet) <= 60 + len("Made in the U.S.A.") + 60
    assert find_claim_snippet("nothing here") is None


def test_find_zip_fragment():
    assert find_zip_fragment("HQ: Austin, TX 78701-0001, USA") == "TX 78701-0001"
    assert find_zip_fragment("no zip") is None


def test_extract_origins_nested_object_name():
    structured = [{"manufacturer": {"countryOfOrigin": {"name": "Italy"}}}]
    assert extract_origins(structured) == {"Italy"}


def test_extract_origins_collects_distinct_values():
    structured = [
        {"countryOfOrigin": "Vietnam"},
        {"offers": [{"itemOffered": {"countryOfOrigin": "Vietnam"}}]},
        {"countryOfOrigin": ["Mexico", {"name": "Italy"}]},
        {"countryOfOrigin": {"@type": "Country"}},
        "not an object",
    ]
    assert extract_origins(structured) == {"Vietnam", "Mexico", "Italy"}


def test_is_us_origin():
    assert is_us_origin("United States")
    assert is_us_origin(" usa ")
    assert is_us_origin("U.S.A.")
    assert not is_us_origin("Russia")
    assert not is_us_origin("Australia")
    assert not is_us_origin(None)
