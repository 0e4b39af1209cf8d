"""
keysmith.requirements

Password classes, their built-in defaults, and the normalizer that turns a
caller's requirements mapping into one frozen GenerationParameters value.
"""

import enum
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

from loguru import logger

from .charsets import DIGITS, LOWERCASE, UPPERCASE, CharacterClass
from .errors import MalformedRequirements

DEFAULT_SEPARATOR = "-"
MAX_ALPHABET_SIZE = 255
MIN_PIN_LENGTH = 4

DEFAULT_CHARACTERS = "abcdefghijkmnopqrstuvwxyzABCDEFGHJKLMNPQRSTUVWXYZ123456789"
PIN_CHARACTERS = "0123456789"
WIFI_CHARACTERS = "abcdefghijklmnopqrstuvwxyz1234567890"
ICLOUD_CHARACTERS = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


class PasswordClass(enum.Enum):
    GENERIC = "generic"
    PIN = "pin"
    WIFI = "wifi"
    ICLOUD_RECOVERY = "icloud_recovery"
    SAFARI = "safari"
    SERVICE_SPECIFIC = "service_specific"

    @classmethod
    def parse(cls, value: Union["PasswordClass", str]) -> "PasswordClass":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower().replace("-", "_"))
        except ValueError:
            raise ValueError(f"unknown password type: {value!r}") from None


@dataclass(frozen=True)
class Grouping:
    group_size: int
    number_of_groups: int
    separator: str = DEFAULT_SEPARATOR

    def split(self, raw: str) -> str:
        """Join `group_size` chunks of `raw` with the separator; the last chunk may be short."""
        chunks = [raw[i:i + self.group_size] for i in range(0, len(raw), self.group_size)]
        return self.separator.join(chunks)


@dataclass(frozen=True)
class OccurrenceBound:
    characters: str
    count: int


@dataclass(frozen=True)
class ClassDefaults:
    alphabet: str
    length: int
    required_character_sets: Tuple[CharacterClass, ...]
    grouping: Grouping


@dataclass(frozen=True)
class GenerationParameters:
    alphabet: str
    length: int
    required_character_sets: Tuple[CharacterClass, ...] = ()
    disallowed_characters: str = ""
    cannot_start_with: str = ""
    cannot_end_with: str = ""
    grouping: Optional[Grouping] = None
    max_occurrences: Optional[OccurrenceBound] = None
    min_occurrences: Optional[OccurrenceBound] = None
    max_consecutive_identical: Optional[int] = None
    use_default_format: bool = True


CLASS_DEFAULTS = MappingProxyType({
    PasswordClass.GENERIC: ClassDefaults(
        DEFAULT_CHARACTERS, 20, (UPPERCASE, LOWERCASE, DIGITS), Grouping(4, 6)),
    PasswordClass.SERVICE_SPECIFIC: ClassDefaults(
        DEFAULT_CHARACTERS, 20, (UPPERCASE, LOWERCASE, DIGITS), Grouping(4, 6)),
    PasswordClass.SAFARI: ClassDefaults(
        DEFAULT_CHARACTERS, 20, (UPPERCASE, LOWERCASE, DIGITS), Grouping(4, 5)),
    PasswordClass.PIN: ClassDefaults(
        PIN_CHARACTERS, 4, (DIGITS,), Grouping(4, 1)),
    PasswordClass.WIFI: ClassDefaults(
        WIFI_CHARACTERS, 12, (LOWERCASE, DIGITS), Grouping(4, 3)),
    PasswordClass.ICLOUD_RECOVERY: ClassDefaults(
        ICLOUD_CHARACTERS, 24, (UPPERCASE, DIGITS), Grouping(4, 6)),
})

RECOGNIZED_KEYS = frozenset({
    "min_length",
    "max_length",
    "allowed_characters",
    "required_character_sets",
    "disallowed_characters",
    "cannot_start_with",
    "cannot_end_with",
    "group_size",
    "number_of_groups",
    "separator",
    "max_occurrences_of_specific_chars",
    "min_occurrences_of_specific_chars",
    "max_consecutive_identical_chars",
    "use_class_defaults",
})


def default_grouping_for(password_class: Union[PasswordClass, str]) -> Grouping:
    return CLASS_DEFAULTS[PasswordClass.parse(password_class)].grouping


def default_parameters(password_class: Union[PasswordClass, str]) -> GenerationParameters:
    defaults = CLASS_DEFAULTS[PasswordClass.parse(password_class)]
    return GenerationParameters(
        alphabet=defaults.alphabet,
        length=defaults.length,
        required_character_sets=defaults.required_character_sets,
        grouping=defaults.grouping,
        use_default_format=True,
    )


# ---------------- validation ----------------

def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _positive_int(raw: Mapping, key: str) -> Optional[int]:
    value = raw.get(key)
    if value is None:
        return None
    if not _is_int(value) or value < 1:
        raise MalformedRequirements(f"'{key}' must be a positive integer", key)
    return value


def _string(raw: Mapping, key: str, allow_empty: bool = True) -> Optional[str]:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise MalformedRequirements(f"'{key}' must be a string", key)
    if not allow_empty and not value:
        raise MalformedRequirements(f"'{key}' must not be empty", key)
    return value


def _occurrence_bound(raw: Mapping, key: str) -> Optional[OccurrenceBound]:
    value = raw.get(key)
    if value is None:
        return None
    if isinstance(value, OccurrenceBound):
        value = {"characters": value.characters, "count": value.count}
    if not isinstance(value, Mapping):
        raise MalformedRequirements(f"'{key}' must be a mapping with 'characters' and 'count'", key)
    characters = value.get("characters")
    count = value.get("count")
    if not isinstance(characters, str) or not characters:
        raise MalformedRequirements(f"'{key}.characters' must be a non-empty string", key)
    if not _is_int(count) or count < 0:
        raise MalformedRequirements(f"'{key}.count' must be a non-negative integer", key)
    return OccurrenceBound(characters, count)


def _character_class(item: Any) -> CharacterClass:
    if isinstance(item, CharacterClass):
        return item
    if isinstance(item, str):
        try:
            return CharacterClass.named(item)
        except ValueError as e:
            raise MalformedRequirements(str(e), "required_character_sets") from None
    if isinstance(item, Mapping) and isinstance(item.get("characters"), str) and item["characters"]:
        return CharacterClass.of(item["characters"])
    raise MalformedRequirements(
        "'required_character_sets' entries must be character classes, class names "
        "or {'characters': ...} mappings",
        "required_character_sets",
    )


def _required_sets(raw: Mapping) -> Optional[Tuple[CharacterClass, ...]]:
    value = raw.get("required_character_sets")
    if value is None:
        return None
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise MalformedRequirements("'required_character_sets' must be a list", "required_character_sets")
    if not value:
        raise MalformedRequirements(
            "'required_character_sets' must name at least one character set", "required_character_sets")
    return tuple(_character_class(item) for item in value)


def validate_requirements(password_class: PasswordClass, raw: Mapping) -> None:
    """
    Check the shape of a requirements mapping; raises MalformedRequirements
    naming the first offending field.
    """
    if not isinstance(raw, Mapping):
        raise MalformedRequirements("requirements must be a mapping")
    unknown = sorted(set(raw) - RECOGNIZED_KEYS)
    if unknown:
        raise MalformedRequirements(f"unrecognized requirement(s): {', '.join(map(str, unknown))}", unknown[0])

    min_length = _positive_int(raw, "min_length")
    max_length = _positive_int(raw, "max_length")
    if min_length is not None and max_length is not None and min_length > max_length:
        raise MalformedRequirements("the length parameters make no sense (is max < min?)", "max_length")
    if password_class is PasswordClass.PIN and (min_length is not None or max_length is not None):
        if max(min_length or 0, max_length or 0) < MIN_PIN_LENGTH:
            raise MalformedRequirements(f"a PIN needs at least {MIN_PIN_LENGTH} digits", "min_length")

    _string(raw, "allowed_characters", allow_empty=False)
    _required_sets(raw)
    for key in ("disallowed_characters", "cannot_start_with", "cannot_end_with"):
        _string(raw, key)
    _string(raw, "separator", allow_empty=False)

    group_size = _positive_int(raw, "group_size")
    number_of_groups = _positive_int(raw, "number_of_groups")
    if (group_size is None) != (number_of_groups is None):
        raise MalformedRequirements(
            "'group_size' and 'number_of_groups' must be given together",
            "group_size" if group_size is None else "number_of_groups",
        )

    _occurrence_bound(raw, "max_occurrences_of_specific_chars")
    _occurrence_bound(raw, "min_occurrences_of_specific_chars")
    _positive_int(raw, "max_consecutive_identical_chars")


def _uses_class_defaults(raw: Optional[Mapping]) -> bool:
    if raw is None:
        return True
    if not isinstance(raw, Mapping):
        return False
    flag = raw.get("use_class_defaults", False)
    if not isinstance(flag, bool):
        raise MalformedRequirements("'use_class_defaults' must be a boolean", "use_class_defaults")
    return flag


# ---------------- merging ----------------

def effective_length(password_class: PasswordClass, base: int, min_length: Optional[int],
                     max_length: Optional[int]) -> int:
    """
    Pick the password length from the caller's bounds: an exact value when
    both bounds agree, max-then-min for PINs, otherwise `base` clamped into range.
    """
    if min_length is None and max_length is None:
        return base
    if min_length is not None and min_length == max_length:
        return min_length
    if password_class is PasswordClass.PIN:
        return max_length if max_length is not None else min_length
    length = base
    if min_length is not None and length < min_length:
        length = min_length
    if max_length is not None and length > max_length:
        length = max_length
    return length


def _dedupe(characters: str) -> str:
    return "".join(dict.fromkeys(characters))


def normalize(password_class: Union[PasswordClass, str], raw: Optional[Mapping] = None) -> GenerationParameters:
    """
    Build the GenerationParameters for one generation call.

    Without requirements (or with use_class_defaults) the class defaults are
    used as-is. Otherwise the caller's fields are validated and merged over
    the class defaults.
    """
    password_class = PasswordClass.parse(password_class)
    if _uses_class_defaults(raw):
        return default_parameters(password_class)

    validate_requirements(password_class, raw)
    defaults = CLASS_DEFAULTS[password_class]

    group_size = raw.get("group_size")
    number_of_groups = raw.get("number_of_groups")
    separator = raw.get("separator") or DEFAULT_SEPARATOR
    base_length = group_size * number_of_groups if group_size else defaults.length
    length = effective_length(password_class, base_length, raw.get("min_length"), raw.get("max_length"))

    if password_class is PasswordClass.PIN:
        alphabet = defaults.alphabet
        required = defaults.required_character_sets
        use_default_format = False
    else:
        allowed = raw.get("allowed_characters")
        required = _required_sets(raw)
        explicit_length = raw.get("min_length") is not None or raw.get("max_length") is not None
        use_default_format = (
            not explicit_length
            and length == defaults.length
            and (allowed is None or allowed == defaults.alphabet)
            and required is None
        )
        if allowed is None:
            alphabet = defaults.alphabet
        else:
            # the default separator is never a password character
            if DEFAULT_SEPARATOR in allowed:
                use_default_format = False
            alphabet = allowed.replace(DEFAULT_SEPARATOR, "")
        if required is None:
            required = defaults.required_character_sets

    if group_size:
        grouping = Grouping(group_size, number_of_groups, separator)
    elif use_default_format:
        grouping = replace(defaults.grouping, separator=separator)
    else:
        grouping = None

    if grouping is not None:
        alphabet = "".join(ch for ch in alphabet if ch not in grouping.separator)
    alphabet = _dedupe(alphabet)

    disallowed = raw.get("disallowed_characters") or ""
    if not alphabet:
        raise MalformedRequirements("no allowed characters remain after removing separators",
                                    "allowed_characters")
    if len(alphabet) > MAX_ALPHABET_SIZE:
        raise MalformedRequirements(f"at most {MAX_ALPHABET_SIZE} distinct allowed characters are supported",
                                    "allowed_characters")
    if all(ch in disallowed for ch in alphabet):
        raise MalformedRequirements("every allowed character is also disallowed", "disallowed_characters")

    drawable = "".join(ch for ch in alphabet if ch not in disallowed)
    required = tuple(cs for cs in required if cs.intersects(drawable))
    if len(required) > length:
        required = ()

    params = GenerationParameters(
        alphabet=alphabet,
        length=length,
        required_character_sets=required,
        disallowed_characters=disallowed,
        cannot_start_with=raw.get("cannot_start_with") or "",
        cannot_end_with=raw.get("cannot_end_with") or "",
        grouping=grouping,
        max_occurrences=_occurrence_bound(raw, "max_occurrences_of_specific_chars"),
        min_occurrences=_occurrence_bound(raw, "min_occurrences_of_specific_chars"),
        max_consecutive_identical=raw.get("max_consecutive_identical_chars"),
        use_default_format=use_default_format,
    )
    logger.debug(
        "normalized {} requirements: {} chars from a {}-symbol alphabet, {} required set(s), grouping={}",
        password_class.value, params.length, len(params.alphabet),
        len(params.required_character_sets), params.grouping,
    )
    return params
