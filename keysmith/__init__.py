"""
keysmith
Constraint-based password, PIN and recovery key generator.
"""

from loguru import logger

from .charsets import DIGITS, LOWERCASE, PUNCTUATION, UPPERCASE, CharacterClass
from .errors import GenerationExhausted, KeysmithError, MalformedRequirements, RandomSourceUnavailable
from .evaluator import WeaknessPolicy, assess_password, is_password_weak
from .generator import generate_password
from .requirements import Grouping, PasswordClass, default_grouping_for

# library default: stay quiet unless the application opts in
logger.disable("keysmith")

__all__ = [
    "CharacterClass",
    "DIGITS",
    "LOWERCASE",
    "PUNCTUATION",
    "UPPERCASE",
    "GenerationExhausted",
    "KeysmithError",
    "MalformedRequirements",
    "RandomSourceUnavailable",
    "WeaknessPolicy",
    "assess_password",
    "is_password_weak",
    "generate_password",
    "Grouping",
    "PasswordClass",
    "default_grouping_for",
]
