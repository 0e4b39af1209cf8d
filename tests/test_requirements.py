from keysmith.charsets import DIGITS, LOWERCASE, UPPERCASE, CharacterClass
from keysmith.errors import MalformedRequirements
from keysmith.requirements import (
    DEFAULT_CHARACTERS,
    Grouping,
    OccurrenceBound,
    PasswordClass,
    default_grouping_for,
    effective_length,
    normalize,
)


def _malformed(password_class, raw):
    try:
        normalize(password_class, raw)
    except MalformedRequirements as e:
        return e
    return None


def test_defaults_without_requirements():
    params = normalize(PasswordClass.GENERIC)
    assert params.alphabet == DEFAULT_CHARACTERS
    assert params.length == 20
    assert params.required_character_sets == (UPPERCASE, LOWERCASE, DIGITS)
    assert params.grouping == Grouping(4, 6, "-")
    assert params.use_default_format

    pin = normalize("pin")
    assert pin.alphabet == "0123456789"
    assert pin.length == 4
    assert pin.required_character_sets == (DIGITS,)

def test_use_class_defaults_skips_validation():
    params = normalize(PasswordClass.WIFI, {"use_class_defaults": True, "min_length": "junk"})
    assert params == normalize(PasswordClass.WIFI)

def test_default_grouping_for():
    assert default_grouping_for(PasswordClass.ICLOUD_RECOVERY) == Grouping(4, 6)
    assert default_grouping_for("pin") == Grouping(4, 1)
    assert default_grouping_for("wifi") == Grouping(4, 3)
    assert default_grouping_for(PasswordClass.SAFARI) == Grouping(4, 5)

def test_inverted_lengths():
    e = _malformed(PasswordClass.PIN, {"min_length": 10, "max_length": 2})
    assert e is not None
    assert e.field == "max_length"
    assert _malformed(PasswordClass.GENERIC, {"min_length": 10, "max_length": 2}) is not None

def test_pin_too_short():
    assert _malformed(PasswordClass.PIN, {"max_length": 3}) is not None
    assert _malformed(PasswordClass.PIN, {"min_length": 2, "max_length": 3}) is not None
    assert _malformed(PasswordClass.PIN, {"min_length": 2, "max_length": 4}) is None

def test_shape_errors():
    cases = [
        {"min_length": "12"},
        {"max_length": True},
        {"min_length": 0},
        {"allowed_characters": ""},
        {"allowed_characters": 42},
        {"required_character_sets": []},
        {"required_character_sets": "digits"},
        {"required_character_sets": ["vowels"]},
        {"group_size": 4},
        {"separator": ""},
        {"max_occurrences_of_specific_chars": {"characters": "abc"}},
        {"min_occurrences_of_specific_chars": {"characters": "", "count": 1}},
        {"max_consecutive_identical_chars": -1},
        {"use_class_defaults": "yes"},
        {"colour": "blue"},
    ]
    for raw in cases:
        assert _malformed(PasswordClass.GENERIC, raw) is not None, raw
    assert _malformed(PasswordClass.GENERIC, ["min_length", 4]) is not None

def test_effective_length():
    assert effective_length(PasswordClass.GENERIC, 20, None, None) == 20
    assert effective_length(PasswordClass.GENERIC, 20, 30, None) == 30
    assert effective_length(PasswordClass.GENERIC, 20, None, 10) == 10
    assert effective_length(PasswordClass.GENERIC, 20, 8, 64) == 20
    assert effective_length(PasswordClass.GENERIC, 20, 16, 16) == 16
    assert effective_length(PasswordClass.PIN, 4, 6, 8) == 8
    assert effective_length(PasswordClass.PIN, 4, 6, None) == 6
    assert effective_length(PasswordClass.PIN, 4, None, 5) == 5

def test_custom_length_drops_default_format():
    params = normalize(PasswordClass.GENERIC, {"min_length": 30})
    assert params.length == 30
    assert not params.use_default_format
    assert params.grouping is None

def test_separator_override_keeps_default_format():
    params = normalize(PasswordClass.GENERIC, {"separator": "_"})
    assert params.use_default_format
    assert params.grouping == Grouping(4, 6, "_")

def test_explicit_grouping_sets_length():
    params = normalize(PasswordClass.GENERIC, {"group_size": 4, "number_of_groups": 6})
    assert params.length == 24
    assert params.grouping == Grouping(4, 6, "-")

def test_dash_is_stripped_from_alphabet():
    params = normalize(PasswordClass.GENERIC, {"allowed_characters": "ab-cd"})
    assert params.alphabet == "abcd"
    assert not params.use_default_format

def test_grouping_separator_is_stripped_from_alphabet():
    params = normalize(PasswordClass.GENERIC, {
        "allowed_characters": "abc_def",
        "group_size": 3,
        "number_of_groups": 4,
        "separator": "_",
    })
    assert params.alphabet == "abcdef"

def test_alphabet_is_deduplicated():
    params = normalize(PasswordClass.GENERIC, {"allowed_characters": "aabbcab"})
    assert params.alphabet == "abc"

def test_required_sets_intersect_alphabet():
    params = normalize(PasswordClass.GENERIC, {
        "allowed_characters": "abcdef",
        "required_character_sets": ["uppercase", "lowercase"],
    })
    assert params.required_character_sets == (LOWERCASE,)

def test_custom_required_set():
    params = normalize(PasswordClass.GENERIC, {
        "allowed_characters": "abc!@",
        "required_character_sets": [{"characters": "!@"}, CharacterClass.of("xyz")],
    })
    assert params.required_character_sets == (CharacterClass.of("!@"),)

def test_too_many_required_sets_are_dropped():
    params = normalize(PasswordClass.GENERIC, {"min_length": 2, "max_length": 2})
    assert params.required_character_sets == ()

def test_pin_ignores_alphabet_choices():
    params = normalize(PasswordClass.PIN, {"min_length": 6, "allowed_characters": "abc"})
    assert params.alphabet == "0123456789"
    assert params.length == 6
    assert params.grouping is None

def test_refinements_carried_through():
    params = normalize(PasswordClass.GENERIC, {
        "disallowed_characters": "xyz",
        "cannot_start_with": "0",
        "cannot_end_with": "!",
        "max_occurrences_of_specific_chars": {"characters": "abc", "count": 2},
        "min_occurrences_of_specific_chars": {"characters": "123", "count": 1},
        "max_consecutive_identical_chars": 2,
    })
    assert params.disallowed_characters == "xyz"
    assert params.cannot_start_with == "0"
    assert params.cannot_end_with == "!"
    assert params.max_occurrences == OccurrenceBound("abc", 2)
    assert params.min_occurrences == OccurrenceBound("123", 1)
    assert params.max_consecutive_identical == 2

def test_unusable_alphabets():
    assert _malformed(PasswordClass.GENERIC, {"allowed_characters": "-"}) is not None
    assert _malformed(PasswordClass.GENERIC, {"allowed_characters": "ab", "disallowed_characters": "ba"}) is not None
    wide = "".join(chr(0x100 + i) for i in range(300))
    assert _malformed(PasswordClass.GENERIC, {"allowed_characters": wide}) is not None

def test_unknown_type():
    try:
        normalize("floppy")
        raised = False
    except ValueError:
        raised = True
    assert raised

def test_explicit_bounds_drop_default_format():
    params = normalize(PasswordClass.GENERIC, {"min_length": 8, "max_length": 20})
    assert params.length == 20
    assert not params.use_default_format
    assert params.grouping is None
    params = normalize(PasswordClass.WIFI, {"min_length": 12, "max_length": 12})
    assert params.length == 12
    assert params.grouping is None

def test_required_sets_intersect_drawable_characters():
    params = normalize(PasswordClass.GENERIC, {"disallowed_characters": "123456789"})
    assert params.required_character_sets == (UPPERCASE, LOWERCASE)
    assert params.disallowed_characters == "123456789"
    assert params.use_default_format
