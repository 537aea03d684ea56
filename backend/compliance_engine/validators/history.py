"""Validation history — bounded record of past aggregated results."""

from collections import Counter, deque
from typing import Optional

from compliance_engine.validators.aggregator import round_half_up
from compliance_engine.validators.models import AggregatedResult, ValidationMetrics

DEFAULT_HISTORY_LIMIT = 50
COMMON_ISSUES_LIMIT = 5


class ValidationHistory:
    """Ordered results, oldest first. At capacity the oldest entry is dropped."""

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT):
        if limit <= 0:
            raise ValueError("History limit must be positive")
        self.limit = limit
        self._entries: deque[AggregatedResult] = deque()

    def append(self, result: AggregatedResult) -> None:
        self._entries.append(result)
        while len(self._entries) > self.limit:
            self._entries.popleft()

    def latest(self) -> Optional[AggregatedResult]:
        return self._entries[-1] if self._entries else None

    def entries(self) -> list[AggregatedResult]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def get_metrics(self) -> ValidationMetrics:
        """Summary statistics across every recorded result.

        common_issues holds the most frequent recommendation messages; equal
        counts keep the order in which the messages were first seen.
        """
        if not self._entries:
            return ValidationMetrics()

        total = len(self._entries)
        average_score = round_half_up(sum(r.overall_score for r in self._entries) / total)
        compliance_rate = round_half_up(sum(1 for r in self._entries if r.overall_compliant) / total * 100)

        counts: Counter[str] = Counter()
        for result in self._entries:
            for recommendation in result.recommendations:
                counts[recommendation.message] += 1

        # Counter preserves insertion order and most_common() sorts stably
        common_issues = [message for message, _ in counts.most_common(COMMON_ISSUES_LIMIT)]

        return ValidationMetrics(
            total_validations=total,
            average_score=average_score,
            compliance_rate=compliance_rate,
            common_issues=common_issues,
        )
