from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

import pytest

# Point the app at throwaway state and a missing FAQ index before basicbot.main is imported.
_TEST_DIR = Path(tempfile.mkdtemp(prefix="basicbot-tests-"))
os.environ["STATE_DB_PATH"] = str(_TEST_DIR / "state.db")
os.environ["FAQ_INDEX_PATH"] = str(_TEST_DIR / "faiss" / "faq.index")
os.environ["FAQ_METADATA_PATH"] = str(_TEST_DIR / "faiss" / "faq_metadata.json")
os.environ["RECOGNIZER_BACKEND"] = "keyword"
os.environ["KNOWLEDGE_BACKEND"] = "faq"
os.environ.pop("CATALOG_BASE_URL", None)

from basicbot.services.base import Intent  # noqa: E402
from tests.helpers import BotHarness, ScriptedRecognizer, intent  # noqa: E402


@pytest.fixture
def recognizer() -> ScriptedRecognizer:
    return ScriptedRecognizer(
        {
            "hello": intent(Intent.GREETING),
            "my name is john": intent(Intent.GREETING, userName=["john"]),
            "shop": intent(Intent.SHOES),
            "cancel": intent(Intent.CANCEL),
            "help": intent(Intent.HELP),
        }
    )


@pytest.fixture
def harness(recognizer: ScriptedRecognizer) -> BotHarness:
    return BotHarness(recognizer=recognizer)


@pytest.fixture(scope="session")
def fixtures_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def conversation_update_payload(fixtures_dir: Path) -> dict:
    return json.loads((fixtures_dir / "conversation_update.json").read_text(encoding="utf-8"))


@pytest.fixture
def shopping_turns(fixtures_dir: Path) -> list[dict]:
    return json.loads((fixtures_dir / "shopping_turns.json").read_text(encoding="utf-8"))
