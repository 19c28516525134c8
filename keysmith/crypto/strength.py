"""Entropy estimate and the discrete strength tiers built on it."""

from __future__ import annotations

import functools
import math
from dataclasses import dataclass
from enum import Enum

from keysmith.config import Config
from keysmith.policy.engine import PolicyEngine
from keysmith.policy.models import Policy


class StrengthTier(Enum):
    VERY_WEAK = ("Very Weak", 20)
    WEAK = ("Weak", 40)
    FAIR = ("Fair", 60)
    STRONG = ("Strong", 80)
    VERY_STRONG = ("Very Strong", 100)

    def __init__(self, label: str, percentage: int):
        self.label = label
        self.percentage = percentage


# Upper bounds (exclusive), checked in order; anything above is VERY_STRONG
TIER_THRESHOLDS = (
    (28.0, StrengthTier.VERY_WEAK),
    (36.0, StrengthTier.WEAK),
    (60.0, StrengthTier.FAIR),
    (128.0, StrengthTier.STRONG),
)


@dataclass(frozen=True)
class StrengthReport:
    entropy_bits: float
    tier: StrengthTier
    normalized_score: int

    @property
    def label(self) -> str:
        return self.tier.label


@functools.lru_cache(maxsize=Config.ENTROPY_CACHE_SIZE)
def _entropy_bits(length: int, pool_size: int) -> float:
    return length * math.log2(pool_size)


def calculate_entropy(password: str, pool: str) -> float:
    """``len(password) * log2(len(pool))``.

    Assumes independent uniform draws; the mild skew introduced by rejecting
    non-compliant candidates is ignored.
    """
    if not password or not pool:
        return 0.0
    return _entropy_bits(len(password), len(pool))


def classify(entropy_bits: float) -> StrengthReport:
    if entropy_bits < 0 or math.isnan(entropy_bits):
        raise ValueError("Entropy must be a non-negative number")
    tier = StrengthTier.VERY_STRONG
    for bound, candidate in TIER_THRESHOLDS:
        if entropy_bits < bound:
            tier = candidate
            break
    return StrengthReport(entropy_bits, tier, tier.percentage)


def score(password: str, policy: Policy) -> StrengthReport:
    return classify(calculate_entropy(password, PolicyEngine.build_pool(policy)))
