"""
keysmith.generator
Constrained password generator: rejection sampling over the normalized
requirements, using the unbiased sampler for every draw.

Each attempt draws `length` characters, formats them into groups, and keeps
the result only if it passes the structural predicates and is not weak.
With the built-in class alphabets a draw passes with high probability, so
the loop normally ends within a few attempts; `max_attempts` bounds it for
caller requirements that can never (or only rarely) be met.
"""

from typing import Mapping, NamedTuple, Optional, Union

from loguru import logger

from .errors import GenerationExhausted
from .evaluator import DEFAULT_POLICY, WeaknessPolicy, is_password_weak
from .predicates import passes_all
from .requirements import GenerationParameters, PasswordClass, normalize
from .sampler import UnbiasedSampler

DEFAULT_MAX_ATTEMPTS = 10000


class Accepted(NamedTuple):
    password: str
    attempts: int


class Exhausted(NamedTuple):
    attempts: int


GenerationOutcome = Union[Accepted, Exhausted]


class ConstrainedGenerator:
    def __init__(
        self,
        params: GenerationParameters,
        sampler: Optional[UnbiasedSampler] = None,
        policy: WeaknessPolicy = DEFAULT_POLICY,
        max_attempts: Optional[int] = DEFAULT_MAX_ATTEMPTS,
    ):
        if max_attempts is not None and max_attempts < 1:
            raise ValueError("max_attempts must be >= 1 or None")
        self.params = params
        self.sampler = sampler or UnbiasedSampler()
        self.policy = policy
        self.max_attempts = max_attempts

    def draw(self) -> str:
        """
        Draw `length` characters from the alphabet. A character that is
        disallowed is redrawn on its own until it is clean.
        """
        alphabet = self.params.alphabet
        disallowed = self.params.disallowed_characters
        size = len(alphabet)
        chars = [alphabet[i] for i in self.sampler.draw_indices(self.params.length, size)]
        if disallowed:
            redraws = 0
            for pos, ch in enumerate(chars):
                while ch in disallowed:
                    ch = alphabet[self.sampler.draw_indices(1, size)[0]]
                    redraws += 1
                chars[pos] = ch
            if redraws:
                logger.debug("redrew {} disallowed character(s)", redraws)
        return "".join(chars)

    def format(self, raw: str) -> str:
        grouping = self.params.grouping
        if grouping is None:
            return raw
        return grouping.split(raw)

    def validate(self, raw: str) -> bool:
        return passes_all(raw, self.params) and not is_password_weak(raw, self.policy)

    def run(self) -> GenerationOutcome:
        attempts = 0
        while self.max_attempts is None or attempts < self.max_attempts:
            attempts += 1
            raw = self.draw()
            password = self.format(raw)
            if self.validate(raw):
                logger.debug("accepted candidate after {} attempt(s)", attempts)
                return Accepted(password, attempts)
        logger.warning("no candidate passed after {} attempts", attempts)
        return Exhausted(attempts)

    def generate(self) -> str:
        outcome = self.run()
        if isinstance(outcome, Exhausted):
            raise GenerationExhausted(outcome.attempts)
        return outcome.password


def generate(
    params: GenerationParameters,
    sampler: Optional[UnbiasedSampler] = None,
    policy: WeaknessPolicy = DEFAULT_POLICY,
    max_attempts: Optional[int] = DEFAULT_MAX_ATTEMPTS,
) -> str:
    return ConstrainedGenerator(params, sampler, policy, max_attempts).generate()


def generate_password(
    password_class: Union[PasswordClass, str] = PasswordClass.GENERIC,
    requirements: Optional[Mapping] = None,
    *,
    sampler: Optional[UnbiasedSampler] = None,
    policy: WeaknessPolicy = DEFAULT_POLICY,
    max_attempts: Optional[int] = DEFAULT_MAX_ATTEMPTS,
) -> str:
    """
    Generate a password of the given class that meets `requirements`.

    Raises MalformedRequirements before any draw when the requirements are
    malformed, RandomSourceUnavailable when the random source keeps failing,
    and GenerationExhausted when `max_attempts` candidates were rejected.
    """
    params = normalize(password_class, requirements)
    return generate(params, sampler=sampler, policy=policy, max_attempts=max_attempts)
