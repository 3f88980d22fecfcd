import pytest

from basicbot.bot import build_bot
from basicbot.core.config import Settings
from basicbot.core.errors import ConfigurationError
from basicbot.services.catalog import HttpProductCatalog, JsonProductCatalog
from basicbot.services.faq import FaqKnowledgeBase
from basicbot.services.keywords import KeywordRecognizer
from basicbot.services.luis import LuisRecognizer
from basicbot.services.qna import QnAMakerKnowledgeBase


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def test_defaults_use_local_collaborators(memory_storage):
    bot = build_bot(make_settings(), memory_storage)

    assert isinstance(bot.knowledge_base, FaqKnowledgeBase)
    assert isinstance(bot.recognizer, KeywordRecognizer)
    assert isinstance(bot.catalog, JsonProductCatalog)


def test_remote_collaborators_when_configured(memory_storage):
    bot = build_bot(
        make_settings(
            knowledge_backend="qnamaker",
            qna_host="https://shop.azurewebsites.net/qnamaker",
            qna_kb_id="kb-1",
            qna_endpoint_key="key-1",
            recognizer_backend="luis",
            luis_endpoint="https://westus.api.cognitive.microsoft.com",
            luis_app_id="app-1",
            luis_key="luis-key",
            catalog_base_url="https://catalog.example.com",
        ),
        memory_storage,
    )

    assert isinstance(bot.knowledge_base, QnAMakerKnowledgeBase)
    assert isinstance(bot.recognizer, LuisRecognizer)
    assert isinstance(bot.catalog, HttpProductCatalog)


@pytest.mark.parametrize(
    "overrides",
    [
        {"knowledge_backend": "qnamaker", "qna_kb_id": "kb-1"},
        {"recognizer_backend": "luis", "luis_app_id": "app-1", "luis_key": "luis-key"},
    ],
)
def test_incomplete_remote_settings_raise(memory_storage, overrides):
    with pytest.raises(ConfigurationError):
        build_bot(make_settings(**overrides), memory_storage)


def test_missing_welcome_card_raises(memory_storage, tmp_path):
    with pytest.raises(ConfigurationError):
        build_bot(make_settings(welcome_card_path=tmp_path / "missing.json"), memory_storage)
