"""BreachResult: outcome of a single k-anonymity range lookup."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BreachResult:
    breached: bool
    occurrence_count: int = 0

    @classmethod
    def clean(cls) -> BreachResult:
        return cls(breached=False, occurrence_count=0)
