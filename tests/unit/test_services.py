import asyncio
import json

import httpx
import pytest

from basicbot.core.config import RESOURCES_DIR
from basicbot.core.errors import CollaboratorError
from basicbot.services.base import Intent
from basicbot.services.catalog import HttpProductCatalog, JsonProductCatalog
from basicbot.services.faq import FaqKnowledgeBase, write_index
from basicbot.services.luis import LuisRecognizer
from basicbot.services.qna import QnAMakerKnowledgeBase
from basicbot.state.models import ShoppingRecord


def run(coro):
    return asyncio.run(coro)


def test_qna_filters_and_scales_answers():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "answers": [
                    {"id": 4, "answer": "Too weak", "score": 10},
                    {"id": -1, "answer": "No good match found in KB.", "score": 100},
                    {"id": 3, "answer": "We open at 9.", "score": 82.5},
                ]
            },
        )

    knowledge_base = QnAMakerKnowledgeBase(
        "https://shop.azurewebsites.net/qnamaker",
        "kb-1",
        "key-1",
        transport=httpx.MockTransport(handler),
    )

    answers = run(knowledge_base.get_answers("when do you open?"))

    assert seen == {
        "path": "/qnamaker/knowledgebases/kb-1/generateAnswer",
        "auth": "EndpointKey key-1",
        "body": {"question": "when do you open?", "top": 1},
    }
    assert [answer.text for answer in answers] == ["We open at 9."]
    assert answers[0].score == pytest.approx(0.825)


def test_qna_http_failure_raises_collaborator_error():
    knowledge_base = QnAMakerKnowledgeBase(
        "https://shop.azurewebsites.net/qnamaker",
        "kb-1",
        "key-1",
        transport=httpx.MockTransport(lambda request: httpx.Response(503)),
    )

    with pytest.raises(CollaboratorError) as excinfo:
        run(knowledge_base.get_answers("hello"))

    assert excinfo.value.collaborator == "qnamaker"


def test_luis_parses_intent_and_resolved_entities():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/luis/v2.0/apps/app-1"
        assert request.url.params["q"] == "boots under 100"
        assert request.url.params["subscription-key"] == "luis-key"
        return httpx.Response(
            200,
            json={
                "topScoringIntent": {"intent": "Shoes", "score": 0.93},
                "entities": [
                    {"entity": "boots", "type": "productCategorie", "resolution": {"values": ["Boots"]}},
                    {"entity": "100", "type": "priceMax"},
                    {"entity": "ignored"},
                ],
            },
        )

    recognizer = LuisRecognizer(
        "https://westus.api.cognitive.microsoft.com",
        "app-1",
        "luis-key",
        transport=httpx.MockTransport(handler),
    )

    result = run(recognizer.recognize("boots under 100"))

    assert result.top_intent is Intent.SHOES
    assert result.score == pytest.approx(0.93)
    assert result.entities == {"productCategorie": ["Boots"], "priceMax": ["100"]}


def test_luis_unknown_intent_maps_to_none():
    recognizer = LuisRecognizer(
        "https://westus.api.cognitive.microsoft.com",
        "app-1",
        "luis-key",
        transport=httpx.MockTransport(
            lambda request: httpx.Response(200, json={"topScoringIntent": {"intent": "Weather", "score": 0.7}})
        ),
    )

    assert run(recognizer.recognize("is it raining")).top_intent is Intent.NONE


def test_http_catalog_posts_shopping_record():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json=[{"Name": "Clarks Desert Boot", "Price": 150, "Image": "https://img/clarks.jpg", "Categorie": "Boots"}],
        )

    catalog = HttpProductCatalog("https://catalog.example.com/", transport=httpx.MockTransport(handler))

    products = run(catalog.find_products(ShoppingRecord(category="Boots", price_max=200.0)))

    assert seen == {
        "path": "/api/Products/ProductByCategorie",
        "body": {"Categorie": "Boots", "PriceMin": 0.0, "PriceMax": 200.0},
    }
    assert [(product.name, product.price) for product in products] == [("Clarks Desert Boot", 150.0)]


def test_http_catalog_rejects_non_list_payload():
    catalog = HttpProductCatalog(
        "https://catalog.example.com",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"error": "nope"})),
    )

    with pytest.raises(CollaboratorError):
        run(catalog.find_products(ShoppingRecord(category="Boots")))


def test_json_catalog_filters_by_category_and_price():
    catalog = JsonProductCatalog(RESOURCES_DIR / "products.json")

    boots = run(catalog.find_products(ShoppingRecord(category="boots")))
    expensive = run(catalog.find_products(ShoppingRecord(category="Boots", price_min=250.0)))
    cheap_sneakers = run(catalog.find_products(ShoppingRecord(category="Sneakers", price_max=75.0)))

    assert len(boots) == 3
    assert [product.name for product in expensive] == ["Red Wing Iron Ranger"]
    assert [product.name for product in cheap_sneakers] == ["Puma Suede Classic"]


def test_json_catalog_missing_file_returns_nothing(tmp_path):
    catalog = JsonProductCatalog(tmp_path / "missing.json")

    assert run(catalog.find_products(ShoppingRecord(category="Boots"))) == []


def test_faq_answers_closest_question(tmp_path):
    entries = [
        {"question": "What are your opening hours?", "answer": "Nine to five, Monday to Saturday."},
        {"question": "How do I return a pair of shoes?", "answer": "Within 30 days with a receipt."},
    ]
    index_path = tmp_path / "faq.index"
    metadata_path = tmp_path / "faq_metadata.json"
    write_index(entries, index_path, metadata_path)

    knowledge_base = FaqKnowledgeBase(index_path, metadata_path, min_score=0.5)

    answers = run(knowledge_base.get_answers("what are your opening hours"))

    assert knowledge_base.ready
    assert [answer.text for answer in answers] == ["Nine to five, Monday to Saturday."]
    assert run(knowledge_base.get_answers("zebra")) == []


def test_faq_without_index_is_disabled(tmp_path):
    knowledge_base = FaqKnowledgeBase(tmp_path / "faq.index", tmp_path / "faq_metadata.json")

    assert not knowledge_base.ready
    assert run(knowledge_base.get_answers("what are your opening hours")) == []


def test_qna_non_object_payload_raises_collaborator_error():
    knowledge_base = QnAMakerKnowledgeBase(
        "https://shop.azurewebsites.net/qnamaker",
        "kb-1",
        "key-1",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=[{"answer": "hi"}])),
    )

    with pytest.raises(CollaboratorError) as excinfo:
        run(knowledge_base.get_answers("hello"))

    assert excinfo.value.collaborator == "qnamaker"


def test_luis_non_object_payload_raises_collaborator_error():
    recognizer = LuisRecognizer(
        "https://westus.api.cognitive.microsoft.com",
        "app-1",
        "luis-key",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=["Shoes"])),
    )

    with pytest.raises(CollaboratorError) as excinfo:
        run(recognizer.recognize("boots"))

    assert excinfo.value.collaborator == "luis"


def test_json_catalog_malformed_price_raises_collaborator_error(tmp_path):
    path = tmp_path / "products.json"
    path.write_text(
        json.dumps([{"Name": "Mystery Boot", "Price": "call us", "Image": "", "Categorie": "Boots"}]),
        encoding="utf-8",
    )
    catalog = JsonProductCatalog(path)

    with pytest.raises(CollaboratorError) as excinfo:
        run(catalog.find_products(ShoppingRecord(category="Boots")))

    assert excinfo.value.collaborator == "catalog-file"
