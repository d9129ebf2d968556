import math
import pytest
from values import JSPrimitive, JSNull
from jseval import binary_operation, number_to_string, to_bool, decode_escapes, quote_string, decode_base64, DecodeFailure

def fold(op, a, b):
    return binary_operation(op, JSPrimitive(a) if a is not None else JSNull, JSPrimitive(b) if b is not None else JSNull)

@pytest.mark.parametrize("x, text", [
    (1.0, "1"),
    (0.1, "0.1"),
    (-1.5, "-1.5"),
    (1e21, "1e+21"),
    (1.2345678901234568e+20, "123456789012345680000"),
    (1e-7, "1e-7"),
    (0.000001, "0.000001"),
    (0.30000000000000004, "0.30000000000000004"),
    (math.inf, "Infinity"),
    (-math.inf, "-Infinity"),
    (math.nan, "NaN"),
    (-0.0, "0"),
])
def test_number_to_string(x, text):
    assert number_to_string(x) == text

def test_arithmetic():
    assert fold("+", 1, 2) == JSPrimitive(3.0)
    assert fold("*", 2, 3.5) == JSPrimitive(7.0)
    assert fold("%", 5, 3) == JSPrimitive(2.0)
    assert fold("%", -5, 3) == JSPrimitive(-2.0)
    assert fold("**", 2, 10) == JSPrimitive(1024.0)

def test_division_by_zero():
    assert fold("/", 1, 0).val == math.inf
    assert fold("/", -1, 0).val == -math.inf
    assert math.isnan(fold("/", 0, 0).val)

def test_negative_zero():
    r = fold("/", 0, -1)
    assert r.val == 0 and math.copysign(1.0, r.val) < 0

def test_bitwise():
    assert fold("|", 2**32 + 1, 0) == JSPrimitive(1.0)
    assert fold("&", 6, 3) == JSPrimitive(2.0)
    assert fold("^", 6, 3) == JSPrimitive(5.0)
    assert fold("<<", 1, 33) == JSPrimitive(2.0)
    assert fold("<<", 1, 31) == JSPrimitive(-2147483648.0)
    assert fold(">>", -8, 1) == JSPrimitive(-4.0)

def test_string_concatenation():
    assert fold("+", "a", "b") == JSPrimitive("ab")
    assert fold("+", "a", 1) == JSPrimitive("a1")
    assert fold("+", 1.5, "a") == JSPrimitive("1.5a")
    assert fold("+", "a", None) == JSPrimitive("anull")
    assert fold("+", "a", True) == JSPrimitive("atrue")

def test_strings_only_with_plus():
    assert fold("-", "a", 1) is None
    assert fold("*", "2", 2) is None

def test_coercions():
    assert fold("+", True, 1) == JSPrimitive(2.0)
    assert fold("+", None, 1) == JSPrimitive(1.0)

def test_unknown_operator():
    assert fold("===", 1, 1) is None
    assert fold(">>>", 1, 1) is None

def test_to_bool():
    assert to_bool(JSPrimitive("")) is False
    assert to_bool(JSPrimitive("0")) is True
    assert to_bool(JSPrimitive(0)) is False
    assert to_bool(JSPrimitive(math.nan)) is False
    assert to_bool(JSNull) is False
    assert to_bool(JSPrimitive(True)) is True

def test_decode_escapes():
    assert decode_escapes("\\x41") == ("A", True)
    assert decode_escapes("\\u0041b") == ("Ab", True)
    assert decode_escapes("plain") == ("plain", False)

def test_decode_escapes_escaped_backslash():
    #\\x41 is a backslash followed by x41
    assert decode_escapes("\\\\x41") == ("\\\\x41", False)

def test_decode_escapes_invalid():
    assert decode_escapes("\\xZZ") == ("\\xZZ", False)
    assert decode_escapes("\\u12") == ("\\u12", False)
    assert decode_escapes("\\n\\x41") == ("\\nA", True)

def test_quote_string():
    assert quote_string('a"b') == '"a\\"b"'
    assert quote_string("it's", "'") == "'it\\'s'"
    assert quote_string("a\nb") == '"a\\nb"'
    assert quote_string("\x00") == '"\\x00"'
    assert quote_string("\\") == '"\\\\"'

def test_decode_base64():
    assert decode_base64("aGVsbG8=") == "hello"
    assert decode_base64("aGVsbG8") == "hello"

@pytest.mark.parametrize("payload", ["!!!", "a", "/w=="])
def test_decode_base64_failure(payload):
    with pytest.raises(DecodeFailure):
        decode_base64(payload)
