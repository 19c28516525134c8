"""Policy data model: character classes, ambiguous set, and the Policy itself."""

from __future__ import annotations

import string
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Tuple

from keysmith.errors import InvalidPolicyError


# ============================================================================
#  Character classes
# ============================================================================
SYMBOLS = "!@#$%^&*_-+=?"
AMBIGUOUS_CHARACTERS = "O0l1I|"

# Keyboard-adjacency and ascending runs
DEFAULT_FORBIDDEN_PATTERNS: Tuple[str, ...] = (
    "qwerty",
    "asdfgh",
    "zxcvbn",
    "123456",
    "abcdef",
)


class CharacterClass(Enum):
    UPPER = "upper"
    LOWER = "lower"
    DIGIT = "digit"
    SYMBOL = "symbol"

    @property
    def alphabet(self) -> str:
        return _ALPHABETS[self]

    @classmethod
    def ordered(cls) -> Tuple[CharacterClass, ...]:
        """Fixed pool order, keeps entropy figures reproducible."""
        return (cls.UPPER, cls.LOWER, cls.DIGIT, cls.SYMBOL)


_ALPHABETS = {
    CharacterClass.UPPER: string.ascii_uppercase,
    CharacterClass.LOWER: string.ascii_lowercase,
    CharacterClass.DIGIT: string.digits,
    CharacterClass.SYMBOL: SYMBOLS,
}


def _parse_class(name) -> CharacterClass:
    if isinstance(name, CharacterClass):
        return name
    try:
        return CharacterClass(str(name).strip().lower())
    except ValueError:
        raise InvalidPolicyError(f"Unknown character class: {name!r}") from None


def _parse_classes(names: Iterable) -> FrozenSet[CharacterClass]:
    return frozenset(_parse_class(n) for n in names)


# ============================================================================
#  Policy
# ============================================================================
@dataclass
class Policy:
    """Caller-owned generation policy.

    The generator treats a policy as read-only for the duration of one call;
    callers are free to mutate it between calls.
    """

    length: int
    classes: FrozenSet[CharacterClass] = field(
        default_factory=lambda: frozenset(CharacterClass)
    )
    avoid_ambiguous: bool = False
    min_per_class: Dict[CharacterClass, int] = field(default_factory=dict)
    avoid_repeats: bool = False
    max_consecutive_repeats: int = 2
    forbidden_patterns: Tuple[str, ...] = DEFAULT_FORBIDDEN_PATTERNS

    def __post_init__(self):
        # Accept class names as strings, store enum members only
        self.classes = _parse_classes(self.classes)
        self.min_per_class = {
            _parse_class(cls): int(count) for cls, count in self.min_per_class.items()
        }
        self.forbidden_patterns = tuple(self.forbidden_patterns)

    def minimum(self, cls: CharacterClass) -> int:
        return self.min_per_class.get(cls, 0)

    def copy(self) -> Policy:
        return Policy(
            length=self.length,
            classes=frozenset(self.classes),
            avoid_ambiguous=self.avoid_ambiguous,
            min_per_class=dict(self.min_per_class),
            avoid_repeats=self.avoid_repeats,
            max_consecutive_repeats=self.max_consecutive_repeats,
            forbidden_patterns=tuple(self.forbidden_patterns),
        )

    def to_dict(self) -> Dict:
        return {
            "length": self.length,
            "classes": [c.value for c in CharacterClass.ordered() if c in self.classes],
            "avoid_ambiguous": self.avoid_ambiguous,
            "min_per_class": {c.value: n for c, n in self.min_per_class.items()},
            "avoid_repeats": self.avoid_repeats,
            "max_consecutive_repeats": self.max_consecutive_repeats,
            "forbidden_patterns": list(self.forbidden_patterns),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> Policy:
        minimums = {
            _parse_class(name): int(count)
            for name, count in data.get("min_per_class", {}).items()
        }
        return cls(
            length=int(data["length"]),
            classes=_parse_classes(data.get("classes", [c.value for c in CharacterClass])),
            avoid_ambiguous=bool(data.get("avoid_ambiguous", False)),
            min_per_class=minimums,
            avoid_repeats=bool(data.get("avoid_repeats", False)),
            max_consecutive_repeats=int(data.get("max_consecutive_repeats", 2)),
            forbidden_patterns=tuple(
                data.get("forbidden_patterns", DEFAULT_FORBIDDEN_PATTERNS)
            ),
        )
