"""
keysmith.charsets

Character classes used for required sets, occurrence bounds and the
entropy buckets of the weakness heuristic.
"""

import string
import unicodedata
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, FrozenSet, Optional


def _is_upper(ch: str) -> bool:
    return ch.isupper()


def _is_lower(ch: str) -> bool:
    return ch.islower()


def _is_digit(ch: str) -> bool:
    return ch.isdecimal()


def _is_punctuation(ch: str) -> bool:
    return ch in string.punctuation or unicodedata.category(ch).startswith("P")


_PREDICATES: Dict[str, Callable[[str], bool]] = {
    "uppercase": _is_upper,
    "lowercase": _is_lower,
    "digits": _is_digit,
    "punctuation": _is_punctuation,
}


@dataclass(frozen=True)
class CharacterClass:
    """
    A named membership test over single characters.

    Built-in classes are resolved by name; custom classes carry an explicit
    set of member characters.
    """

    name: str
    members: Optional[FrozenSet[str]] = None

    def __post_init__(self):
        if self.members is None and self.name not in _PREDICATES:
            raise ValueError(f"unknown character class: {self.name!r}")

    @classmethod
    def of(cls, characters: str) -> "CharacterClass":
        if not characters:
            raise ValueError("a custom character class needs at least one character")
        return cls(name=f"custom:{characters}", members=frozenset(characters))

    @classmethod
    def named(cls, name: str) -> "CharacterClass":
        key = name.strip().lower()
        builtin = BUILTIN_CLASSES.get(key)
        if builtin is None:
            raise ValueError(f"unknown character class: {name!r}")
        return builtin

    def __contains__(self, ch: str) -> bool:
        if self.members is not None:
            return ch in self.members
        return _PREDICATES[self.name](ch)

    def intersects(self, text: str) -> bool:
        return any(ch in self for ch in text)

    def count_in(self, text: str) -> int:
        return sum(1 for ch in text if ch in self)


UPPERCASE = CharacterClass("uppercase")
LOWERCASE = CharacterClass("lowercase")
DIGITS = CharacterClass("digits")
PUNCTUATION = CharacterClass("punctuation")

BUILTIN_CLASSES = MappingProxyType({
    "uppercase": UPPERCASE,
    "upper": UPPERCASE,
    "lowercase": LOWERCASE,
    "lower": LOWERCASE,
    "digits": DIGITS,
    "digit": DIGITS,
    "punctuation": PUNCTUATION,
    "symbols": PUNCTUATION,
})
