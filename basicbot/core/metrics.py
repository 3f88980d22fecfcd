"""Lightweight in-memory metrics collector."""

from __future__ import annotations

import threading
from collections import Counter
from dataclasses import dataclass
from typing import Dict


@dataclass
class MetricSnapshot:
    total_turns: int
    intents: Dict[str, int]
    outcomes: Dict[str, int]


class MetricsCollector:
    """Thread-safe counter storage for basic turn metrics."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._total_turns = 0
        self._intents: Counter[str] = Counter()
        self._outcomes: Counter[str] = Counter()

    def record_turn(self, intent: str | None, outcome: str) -> None:
        with self._lock:
            self._total_turns += 1
            if intent:
                self._intents[intent] += 1
            self._outcomes[outcome] += 1

    def snapshot(self) -> MetricSnapshot:
        with self._lock:
            return MetricSnapshot(
                total_turns=self._total_turns,
                intents=dict(self._intents),
                outcomes=dict(self._outcomes),
            )
