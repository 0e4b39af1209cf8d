"""
keysmith.sampler

Uniform index sampling over an alphabet from a secure random byte source.

Mapping a byte in [0, 255] onto a smaller range with a plain modulo favours
the low end whenever the range does not divide 256 evenly (for 55 symbols,
bytes 220..255 only reach 0..35). Bytes at or above the last full multiple
of the range are discarded instead.
"""

from secrets import token_bytes
from typing import Callable, List, Optional

from loguru import logger

from .errors import RandomSourceUnavailable

RandomSource = Callable[[int], bytes]

UCHAR_MAX = 255
DEFAULT_RETRY_LIMIT = 8


def rejection_limit(upper_bound: int) -> int:
    """Bytes >= this value are discarded for the given range."""
    return UCHAR_MAX - (UCHAR_MAX % upper_bound)


class UnbiasedSampler:
    def __init__(self, source: Optional[RandomSource] = None, retry_limit: Optional[int] = DEFAULT_RETRY_LIMIT):
        self.source = source or token_bytes
        self.retry_limit = retry_limit

    def _fill(self, n: int) -> bytes:
        failures = 0
        while True:
            try:
                data = self.source(n)
            except OSError as e:
                failures += 1
                logger.warning("secure random source failed ({}), retrying batch of {} bytes", e, n)
            else:
                if len(data) == n:
                    return data
                failures += 1
                logger.warning("secure random source returned {} of {} bytes, retrying", len(data), n)
            if self.retry_limit is not None and failures >= self.retry_limit:
                raise RandomSourceUnavailable(f"secure random source failed {failures} times in a row")

    def draw_indices(self, count: int, upper_bound: int) -> List[int]:
        """
        Return `count` indices, each uniform in [0, upper_bound).
        """
        if not 1 <= upper_bound < 256:
            raise ValueError("upper_bound must be in [1, 256)")
        if count < 0:
            raise ValueError("count must be >= 0")

        limit = rejection_limit(upper_bound)
        indices: List[int] = []
        while len(indices) < count:
            batch = self._fill(count - len(indices))
            indices.extend(b % upper_bound for b in batch if b < limit)
        return indices


_default_sampler = UnbiasedSampler()


def draw_indices(count: int, upper_bound: int) -> List[int]:
    return _default_sampler.draw_indices(count, upper_bound)
