"""Application settings and configuration helpers."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List, Literal

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

RESOURCES_DIR = Path(__file__).resolve().parent.parent / "resources"


class Settings(BaseSettings):
    """Strongly-typed configuration sourced from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    app_name: str = Field(default="Basic Bot", description="Human-readable service name.")
    environment: str = Field(default="local", description="Deployment environment identifier.")
    log_level: str = Field(default="INFO", description="Application log level.")

    state_db_path: Path = Field(
        default=Path("db/state.db"),
        description="SQLite file holding user and conversation state.",
    )
    welcome_card_path: Path = Field(
        default=RESOURCES_DIR / "welcome_card.json",
        description="Adaptive card sent to members joining the conversation.",
    )

    recognizer_backend: Literal["keyword", "luis"] = Field(
        default="keyword",
        description="Intent recognizer implementation.",
    )
    luis_endpoint: AnyHttpUrl | None = Field(default=None, description="LUIS endpoint host.")
    luis_app_id: str | None = Field(default=None, description="LUIS application identifier.")
    luis_key: str | None = Field(default=None, description="LUIS subscription key.")

    knowledge_backend: Literal["faq", "qnamaker"] = Field(
        default="faq",
        description="Knowledge base implementation.",
    )
    qna_host: AnyHttpUrl | None = Field(default=None, description="QnA Maker runtime host, ending in /qnamaker.")
    qna_kb_id: str | None = Field(default=None, description="QnA Maker knowledge base identifier.")
    qna_endpoint_key: str | None = Field(default=None, description="QnA Maker endpoint key.")
    qna_top: int = Field(default=1, ge=1, description="Number of answers requested from QnA Maker.")
    qna_score_threshold: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Answers scoring below this threshold are dropped.",
    )

    faq_index_path: Path = Field(
        default=Path("db/faiss/faq.index"),
        description="FAISS index for the local FAQ knowledge base.",
    )
    faq_metadata_path: Path = Field(
        default=Path("db/faiss/faq_metadata.json"),
        description="FAQ entries, vocabulary and idf weights matching the index.",
    )
    faq_min_score: float = Field(
        default=0.6,
        ge=0.0,
        le=1.0,
        description="Minimum cosine similarity for a local FAQ answer.",
    )

    catalog_base_url: AnyHttpUrl | None = Field(
        default=None,
        description="Product catalog service. When omitted the bundled JSON catalog is used.",
    )
    catalog_path: Path = Field(
        default=RESOURCES_DIR / "products.json",
        description="Local product catalog used when no catalog service is configured.",
    )

    http_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout applied to every outbound collaborator call.",
    )

    additional_origins: List[AnyHttpUrl] = Field(
        default_factory=list,
        description="Additional allowed CORS origins for web chat clients.",
    )

    @property
    def cors_origins(self) -> list[str]:
        """Return the full list of allowed CORS origins."""

        origins = ["http://localhost:3978", "http://127.0.0.1:3978"]
        for origin in self.additional_origins:
            origins.append(str(origin).rstrip("/"))

        # Deduplicate while preserving order
        seen: set[str] = set()
        unique: list[str] = []
        for origin in origins:
            if origin not in seen:
                seen.add(origin)
                unique.append(origin)

        return unique

    @property
    def luis_enabled(self) -> bool:
        return self.recognizer_backend == "luis"

    @property
    def qna_enabled(self) -> bool:
        return self.knowledge_backend == "qnamaker"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()
