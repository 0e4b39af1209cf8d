"""
keysmith.evaluator

Weak-password heuristic:
- is_password_weak(candidate): True for short strings, guessable numeric PINs
  (blacklisted, repeated or patterned digits, straight runs) and mixed
  passwords whose entropy estimate falls under the threshold
- estimate_entropy(candidate): length * log2(size of the character pools used)
- assess_password(candidate): returns dict with weak flag, entropy and the
  reasons that fired

This is a heuristic. The blacklist and the 35-bit threshold are empirical
policy values, not a security bound; both live in WeaknessPolicy so callers
can revise them.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Dict, FrozenSet, Iterable, List, Optional

from .charsets import DIGITS, LOWERCASE, PUNCTUATION, UPPERCASE

MIN_LENGTH = 4
PIN_LENGTH = 4

# pins that reached the top 20 list
TOP_PINS = frozenset({"1234", "1004", "2000", "1122", "4321", "2001", "2580"})

# Bonneau, Preibusch, Anderson: "A birthday present every eleven wallets?
# The security of customer-chosen banking PINs" (2012)
COMMON_PINS = frozenset({
    "0000", "0101", "0102", "0103", "0110", "0111", "0123", "0202", "0303", "0404",
    "0505", "0606", "0707", "0808", "0909", "1010", "1101", "1102", "1103", "1110",
    "1111", "1112", "1123", "1201", "1202", "1203", "1210", "1211", "1212", "1234",
    "1956", "1957", "1958", "1959", "1960", "1961", "1962", "1963", "1964", "1965",
    "1966", "1967", "1968", "1969", "1970", "1971", "1972", "1973", "1974", "1975",
    "1976", "1977", "1978", "1979", "1980", "1981", "1982", "1983", "1984", "1985",
    "1986", "1987", "1988", "1989", "1990", "1991", "1992", "1993", "1994", "1995",
    "1996", "1997", "1998", "1999", "2000", "2001", "2002", "2003", "2004", "2005",
    "2006", "2007", "2008", "2009", "2010", "2011", "2012", "2013", "2014", "2015",
    "2222", "2229", "2580", "3333", "4444", "5252", "5683", "6666", "7465", "7667",
})

# (class, pool size) buckets for the entropy estimate
ENTROPY_POOLS = (
    (UPPERCASE, 26),
    (LOWERCASE, 26),
    (DIGITS, 10),
    (PUNCTUATION, 33),
)


@dataclass(frozen=True)
class WeaknessPolicy:
    entropy_threshold: float = 35.0
    blacklisted_pins: FrozenSet[str] = field(default=TOP_PINS | COMMON_PINS)

    def with_extra_pins(self, pins: Iterable[str]) -> "WeaknessPolicy":
        return replace(self, blacklisted_pins=self.blacklisted_pins | frozenset(pins))


DEFAULT_POLICY = WeaknessPolicy()


def _is_numeric(candidate: str) -> bool:
    return all(ch in DIGITS for ch in candidate)


def pool_size(candidate: str) -> int:
    """Sum of the pool sizes of every category that occurs at least once."""
    size = 0
    for char_class, bucket in ENTROPY_POOLS:
        if char_class.intersects(candidate):
            size += bucket
    return size


def estimate_entropy(candidate: str) -> float:
    """
    Entropy estimate in bits: length * log2(pool size).
    Characters outside every category add nothing to the pool; an empty
    pool estimates to 0 bits.
    """
    pool = pool_size(candidate)
    if not candidate or pool == 0:
        return 0.0
    return len(candidate) * math.log2(pool)


def pin_pattern(pin: str) -> Optional[str]:
    """Name the pattern a 4-digit PIN follows, if any."""
    a, b, c, d = pin
    if a == b == c == d:
        return "all digits identical"
    if a == b and c == d:
        return "AABB pattern"
    if a == c and b == d:
        return "ABAB pattern"
    return None


def digit_run(pin: str) -> Optional[str]:
    """Name the run a numeric string forms (repeated, ascending, descending), if any."""
    steps = {ord(nxt) - ord(cur) for cur, nxt in zip(pin, pin[1:])}
    if steps == {0}:
        return "all digits identical"
    if steps == {1}:
        return "ascending digits"
    if steps == {-1}:
        return "descending digits"
    return None


def weakness_reasons(candidate: str, policy: WeaknessPolicy = DEFAULT_POLICY) -> List[str]:
    """
    Return the rules that classify `candidate` as weak; empty when it is strong.
    """
    if len(candidate) < MIN_LENGTH:
        return [f"shorter than {MIN_LENGTH} characters"]

    if _is_numeric(candidate):
        if len(candidate) == PIN_LENGTH:
            reasons = []
            if candidate in policy.blacklisted_pins:
                reasons.append("commonly chosen PIN")
            pattern = pin_pattern(candidate)
            if pattern:
                reasons.append(pattern)
            return reasons
        run = digit_run(candidate)
        return [run] if run else []

    entropy = estimate_entropy(candidate)
    if entropy < policy.entropy_threshold:
        return [f"estimated entropy {entropy:.1f} bits is below {policy.entropy_threshold:.1f}"]
    return []


def is_password_weak(candidate: str, policy: WeaknessPolicy = DEFAULT_POLICY) -> bool:
    return bool(weakness_reasons(candidate, policy))


def assess_password(candidate: str, policy: WeaknessPolicy = DEFAULT_POLICY) -> Dict:
    """
    Returns a dict:
    {
        "password": candidate,
        "weak": bool,
        "entropy": float,   # bits, per estimate_entropy
        "reasons": [str]
    }
    """
    reasons = weakness_reasons(candidate, policy)
    return {
        "password": candidate,
        "weak": bool(reasons),
        "entropy": estimate_entropy(candidate),
        "reasons": reasons,
    }
