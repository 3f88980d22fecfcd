"""Local FAQ knowledge base backed by a TF-IDF FAISS index."""

from __future__ import annotations

import json
import logging
import math
import re
from collections import Counter, defaultdict
from pathlib import Path
from typing import Any

import faiss  # type: ignore
import numpy as np

from basicbot.services.base import Answer, KnowledgeBase

TOKEN_PATTERN = re.compile(r"[a-z0-9]+")


def tokenize(text: str) -> list[str]:
    return TOKEN_PATTERN.findall(text.lower())


def load_entries(path: Path) -> list[dict[str, Any]]:
    """Read FAQ entries (``question``, ``answer`` and optional ``alternates``)."""

    if not path or not path.exists():
        raise FileNotFoundError(f"FAQ file not found at {path}.")

    with path.open("r", encoding="utf-8") as handle:
        data = json.load(handle)

    if not isinstance(data, list):
        raise ValueError("Expected top-level JSON array of FAQ entries")

    entries = []
    for item in data:
        if not isinstance(item, dict) or not item.get("question") or not item.get("answer"):
            raise ValueError(f"FAQ entry needs a question and an answer: {item!r}")
        entries.append(item)
    return entries


def build_embeddings(entries: list[dict[str, Any]]) -> tuple[np.ndarray, list[str], np.ndarray]:
    tokenized: list[list[str]] = []
    for entry in entries:
        alternates = entry.get("alternates") if isinstance(entry.get("alternates"), list) else []
        tokenized.append(tokenize(" ".join([str(entry["question"]), *map(str, alternates)])))

    vocabulary = sorted({token for tokens in tokenized for token in tokens})
    token_to_index = {token: idx for idx, token in enumerate(vocabulary)}

    doc_freq: defaultdict[str, int] = defaultdict(int)
    for tokens in tokenized:
        for token in set(tokens):
            doc_freq[token] += 1

    total_docs = len(entries)
    idf = np.zeros(len(vocabulary), dtype=np.float32)
    for token, idx in token_to_index.items():
        idf[idx] = math.log((1 + total_docs) / (1 + doc_freq[token])) + 1.0

    embeddings = np.zeros((total_docs, len(vocabulary)), dtype=np.float32)
    for doc_idx, tokens in enumerate(tokenized):
        if not tokens:
            continue
        for token, count in Counter(tokens).items():
            token_idx = token_to_index[token]
            embeddings[doc_idx, token_idx] = count / len(tokens) * idf[token_idx]

    faiss.normalize_L2(embeddings)
    return embeddings, vocabulary, idf


def write_index(
    entries: list[dict[str, Any]],
    index_path: Path,
    metadata_path: Path,
) -> int:
    """Build and persist the FAQ index; returns the vocabulary size."""

    embeddings, vocabulary, idf = build_embeddings(entries)
    index = faiss.IndexFlatIP(embeddings.shape[1])
    index.add(embeddings)

    index_path.parent.mkdir(parents=True, exist_ok=True)
    metadata_path.parent.mkdir(parents=True, exist_ok=True)
    faiss.write_index(index, str(index_path))
    payload = {
        "entries": [{"question": entry["question"], "answer": entry["answer"]} for entry in entries],
        "vocabulary": vocabulary,
        "idf": idf.tolist(),
    }
    with metadata_path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, ensure_ascii=False, indent=2)
    return len(vocabulary)


class FaqKnowledgeBase(KnowledgeBase):
    """Answer questions from the bundled FAQ using cosine similarity."""

    name = "faq"

    def __init__(self, index_path: Path, metadata_path: Path, *, min_score: float = 0.6, top: int = 3) -> None:
        self.index_path = Path(index_path)
        self.metadata_path = Path(metadata_path)
        self._min_score = min_score
        self._top = top
        self._entries: list[dict[str, Any]] | None = None
        self._vocabulary: dict[str, int] | None = None
        self._idf: np.ndarray | None = None
        self._index: faiss.Index | None = None
        self._logger = logging.getLogger("basicbot.services.faq")

    def _load_metadata(self) -> list[dict[str, Any]]:
        if self._entries is not None:
            return self._entries

        if not self.metadata_path.exists():
            self._logger.warning("FAQ metadata missing at %s; knowledge base disabled", self.metadata_path)
            self._entries = []
            self._vocabulary = {}
            self._idf = np.array([], dtype=np.float32)
            return self._entries

        with self.metadata_path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)

        entries = data.get("entries")
        vocabulary = data.get("vocabulary")
        idf = data.get("idf")
        if not isinstance(entries, list) or not isinstance(vocabulary, list) or not isinstance(idf, list):
            self._logger.warning("FAQ metadata at %s is malformed; knowledge base disabled", self.metadata_path)
            entries, vocabulary, idf = [], [], []

        self._entries = entries
        self._vocabulary = {str(token): idx for idx, token in enumerate(vocabulary)}
        self._idf = np.array(idf, dtype=np.float32)
        return self._entries

    def _ensure_index(self) -> faiss.Index | None:
        if self._index is not None:
            return self._index
        if not self.index_path.exists():
            return None
        self._index = faiss.read_index(str(self.index_path))
        return self._index

    @property
    def ready(self) -> bool:
        return bool(self._load_metadata()) and self._ensure_index() is not None

    async def get_answers(self, question: str) -> list[Answer]:
        entries = self._load_metadata()
        index = self._ensure_index()
        if not entries or index is None:
            return []

        query_vector = self._vectorize_query(question)
        if query_vector is None:
            return []

        faiss.normalize_L2(query_vector)
        scores, indices = index.search(query_vector, k=min(self._top, len(entries)))
        answers: list[Answer] = []
        for idx, score in zip(indices[0], scores[0], strict=True):
            if idx < 0 or idx >= len(entries) or score < self._min_score:
                continue
            answers.append(Answer(text=str(entries[idx]["answer"]), score=float(score)))
        return answers

    def _vectorize_query(self, text: str) -> np.ndarray | None:
        if not text.strip() or not self._vocabulary or self._idf is None:
            return None

        tokens = tokenize(text)
        if not tokens:
            return None

        vector = np.zeros((1, len(self._vocabulary)), dtype=np.float32)
        for token, count in Counter(tokens).items():
            idx = self._vocabulary.get(token)
            if idx is None:
                continue
            vector[0, idx] = count / len(tokens) * self._idf[idx]
        if not vector.any():
            return None
        return vector
