from keysmith.evaluator import (
    COMMON_PINS,
    TOP_PINS,
    WeaknessPolicy,
    assess_password,
    digit_run,
    estimate_entropy,
    is_password_weak,
    pin_pattern,
    pool_size,
)

def test_pin_scenarios():
    assert is_password_weak("1234")
    assert is_password_weak("0000")
    assert not is_password_weak("1357")

def test_pin_blacklists():
    assert len(COMMON_PINS) == 100
    for pin in TOP_PINS | COMMON_PINS:
        assert is_password_weak(pin)

def test_pin_patterns():
    assert pin_pattern("7777") == "all digits identical"
    assert pin_pattern("7788") == "AABB pattern"
    assert pin_pattern("4545") == "ABAB pattern"
    assert pin_pattern("1357") is None
    assert is_password_weak("7788")
    assert is_password_weak("4545")

def test_short_candidates_are_weak():
    assert is_password_weak("")
    assert is_password_weak("123")
    assert is_password_weak("A!x")

def test_long_numeric_runs():
    assert digit_run("12345") == "ascending digits"
    assert digit_run("654321") == "descending digits"
    assert digit_run("99999") == "all digits identical"
    assert is_password_weak("123456")
    assert is_password_weak("98765")
    assert is_password_weak("00000000")
    assert not is_password_weak("13579")
    assert not is_password_weak("802413")

def test_entropy_estimate():
    assert pool_size("abc") == 26
    assert pool_size("aB3!") == 26 + 26 + 10 + 33
    e_short = estimate_entropy("Ab1!")
    e_long = estimate_entropy("Ab1!" * 4)
    assert e_long > e_short
    assert estimate_entropy("    ") == 0.0

def test_mixed_passwords_against_threshold():
    # 6 * log2(26) ~ 28.2 bits
    assert is_password_weak("qwerty")
    # 8 * log2(95) ~ 52.6 bits
    assert not is_password_weak("Ab1!Xy9?")
    # no recognised category at all
    assert is_password_weak("     ")

def test_deterministic():
    for candidate in ("1234", "1357", "hunter22", "X7f!9Lq@2Vb#tR4sYp"):
        assert is_password_weak(candidate) == is_password_weak(candidate)

def test_policy_is_configurable():
    strict = WeaknessPolicy(entropy_threshold=80.0)
    assert not is_password_weak("Ab1!Xy9?")
    assert is_password_weak("Ab1!Xy9?", strict)
    extended = WeaknessPolicy().with_extra_pins(["1357"])
    assert is_password_weak("1357", extended)

def test_assess_password_reports_reasons():
    result = assess_password("1111")
    assert result["weak"]
    assert "commonly chosen PIN" in result["reasons"]
    assert "all digits identical" in result["reasons"]

    result = assess_password("X7f!9Lq@2Vb#tR4sYp")
    assert not result["weak"]
    assert result["reasons"] == []
    assert result["entropy"] > 100
