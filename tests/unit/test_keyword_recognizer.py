import asyncio

import pytest

from basicbot.services.base import Intent
from basicbot.services.keywords import KeywordRecognizer


def recognize(text):
    return asyncio.run(KeywordRecognizer().recognize(text))


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("hello there", Intent.GREETING),
        ("Good morning!", Intent.GREETING),
        ("I want to go shopping", Intent.SHOES),
        ("any loafers?", Intent.SHOES),
        ("cancel my shoe order", Intent.CANCEL),
        ("what can you do", Intent.HELP),
        ("blorbledygook", Intent.NONE),
    ],
)
def test_intent_classification(text, expected):
    assert recognize(text).top_intent is expected


def test_name_and_city_entities():
    result = recognize("Hi, my name is John and I live in Seattle")

    assert result.top_intent is Intent.GREETING
    assert result.entities == {"userName": ["john"], "userLocation": ["seattle"]}


def test_from_is_not_taken_as_a_name():
    result = recognize("I'm from Paris")

    assert "userName" not in result.entities
    assert result.entities["userLocation"] == ["paris"]


def test_category_and_price_entities():
    result = recognize("show me boots under $100")

    assert result.entities == {"productCategorie": ["boots"], "priceMax": ["100"]}


def test_price_range_entities():
    result = recognize("sneakers between $50 and $120")

    assert result.entities["priceMin"] == ["50"]
    assert result.entities["priceMax"] == ["120"]


def test_unknown_text_has_low_score_and_no_entities():
    result = recognize("blorbledygook")

    assert result.score == 0.5
    assert not result.has_entities


@pytest.mark.parametrize("text", ["Under $75", "$75 to $250", "Over $250", "over $250"])
def test_price_bucket_labels_carry_no_price_entities(text):
    result = recognize(text)

    assert "priceMin" not in result.entities
    assert "priceMax" not in result.entities


def test_free_form_price_phrase_still_extracts_bounds():
    assert recognize("anything over $250 please").entities == {"priceMin": ["250"]}


@pytest.mark.parametrize("text", ["I'm looking for boots", "I am interested in loafers"])
def test_plain_i_am_is_not_a_name(text):
    assert "userName" not in recognize(text).entities


def test_call_me_sets_name():
    assert recognize("call me Ishmael").entities["userName"] == ["ishmael"]
