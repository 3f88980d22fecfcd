import logging

from basicbot.nlu.slots import (
    apply_greeting_slots,
    apply_shopping_slots,
    capitalize_first,
    extract_greeting_slots,
    extract_shopping_slots,
)
from basicbot.state.models import GreetingRecord, ShoppingRecord


def test_exact_entity_wins_over_pattern_any():
    slots = extract_greeting_slots(
        {"userName_patternAny": ["bob"], "userName": ["john"], "userLocation_patternAny": ["paris"]}
    )

    assert slots.name == "John"
    assert slots.city == "Paris"


def test_first_non_empty_value_wins():
    slots = extract_greeting_slots({"userName": ["", "  ", "mike", "anna"]})

    assert slots.name == "Mike"


def test_capitalize_first_keeps_the_rest():
    assert capitalize_first("mcDonald") == "McDonald"
    assert capitalize_first("") == ""


def test_greeting_slots_keep_existing_values_when_missing():
    record = GreetingRecord(name="Ann", city="Oslo")

    applied = apply_greeting_slots(record, {"userLocation": ["bergen"]})

    assert applied is True
    assert record == GreetingRecord(name="Ann", city="Bergen")


def test_no_entities_leave_records_untouched():
    greeting = GreetingRecord(name="Ann")
    shopping = ShoppingRecord(category="Boots", price_min=50.0, price_max=100.0)

    assert apply_greeting_slots(greeting, {}) is False
    assert apply_shopping_slots(shopping, {"priceMin": []}) is False
    assert greeting == GreetingRecord(name="Ann")
    assert shopping == ShoppingRecord(category="Boots", price_min=50.0, price_max=100.0)


def test_prices_reset_when_entities_omit_them():
    record = ShoppingRecord(category="Boots", price_min=50.0, price_max=100.0)

    apply_shopping_slots(record, {"productCategorie": ["loafers"]})

    assert record == ShoppingRecord(category="Loafers", price_min=0.0, price_max=0.0)


def test_prices_strip_currency_and_separators():
    slots = extract_shopping_slots({"priceMin_patternAny": ["$1,250"], "priceMax": ["2000.50"]})

    assert slots.price_min == 1250.0
    assert slots.price_max == 2000.5


def test_unparseable_price_is_logged_and_left_at_zero(caplog):
    with caplog.at_level(logging.WARNING, logger="basicbot.slots"):
        slots = extract_shopping_slots({"priceMin": ["cheap"], "priceMax": ["90"]})

    assert slots.price_min == 0.0
    assert slots.price_max == 90.0
    assert "cheap" in caplog.text
