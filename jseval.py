"""
Evaluation of JS operators over literal values.

Only the closed literal domain (numbers, strings, booleans, null) and a fixed
operator set are handled, so nothing here can run code from the analyzed
program. Numbers follow IEEE-754 double semantics as JS does.
"""
import base64
import binascii
import math
from decimal import Decimal
from typing import Optional, Tuple
from values import JSValue, JSPrimitive, JSNull

FOLDABLE_OPERATORS = ["+", "-", "*", "/", "%", "**", "|", "&", "^", "<<", ">>"]

class DecodeFailure(ValueError):
    """
    Raised when an encoded payload is recognized but cannot be decoded
    """
    pass

## Conversions

def to_bool(v : JSValue) -> bool:
    if v == JSNull:
        return False
    if v.is_bool():
        return v.val
    if v.is_string():
        return len(v.val) > 0
    return not (v.val == 0 or math.isnan(v.val))

def to_number(v : JSValue) -> float:
    if v == JSNull:
        return 0.0
    if v.is_bool():
        return 1.0 if v.val else 0.0
    if v.is_number():
        return v.val
    raise ValueError("to_number: strings are not converted")

def number_to_string(x : float) -> str:
    """
    Number::toString as specified by ECMAScript (shortest round-trip digits)
    """
    if math.isnan(x):
        return "NaN"
    if x == 0:
        return "0"
    if math.isinf(x):
        return "Infinity" if x > 0 else "-Infinity"
    if x < 0:
        return "-" + number_to_string(-x)

    _, digits, exponent = Decimal(repr(float(x))).as_tuple()
    digits = list(digits)
    while len(digits) > 1 and digits[-1] == 0:
        digits.pop()
        exponent += 1
    s = "".join(str(d) for d in digits)
    k = len(s)
    n = exponent + k

    if k <= n <= 21:
        return s + "0" * (n - k)
    if 0 < n <= 21:
        return s[:n] + "." + s[n:]
    if -6 < n <= 0:
        return "0." + "0" * (-n) + s
    e = n - 1
    sign = "+" if e >= 0 else "-"
    if k == 1:
        return s + "e" + sign + str(abs(e))
    return s[0] + "." + s[1:] + "e" + sign + str(abs(e))

def to_string(v : JSValue) -> str:
    if v == JSNull:
        return "null"
    if v.is_bool():
        return "true" if v.val else "false"
    if v.is_number():
        return number_to_string(v.val)
    return v.val

def to_uint32(x : float) -> int:
    if math.isnan(x) or math.isinf(x):
        return 0
    return int(math.trunc(x)) % 2**32

def to_int32(x : float) -> int:
    n = to_uint32(x)
    if n >= 2**31:
        n -= 2**32
    return n

## Operators

def divide(a : float, b : float) -> float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(1.0, a) * math.copysign(1.0, b) * math.inf
    return a / b

def remainder(a : float, b : float) -> float:
    if math.isnan(a) or math.isnan(b) or math.isinf(a) or b == 0:
        return math.nan
    if math.isinf(b):
        return a
    return math.fmod(a, b)

def is_odd_integer(x : float) -> bool:
    return math.isfinite(x) and x == math.floor(x) and math.fmod(x, 2) != 0

def power(a : float, b : float) -> float:
    if math.isnan(b):
        return math.nan
    if b == 0:
        return 1.0
    if math.isnan(a):
        return math.nan
    if abs(a) == 1 and math.isinf(b):
        return math.nan
    try:
        return math.pow(a, b)
    except OverflowError:
        if a < 0 and is_odd_integer(b):
            return -math.inf
        return math.inf
    except ValueError:
        if a == 0 and b < 0:
            if math.copysign(1.0, a) < 0 and is_odd_integer(b):
                return -math.inf
            return math.inf
        return math.nan

def binary_operation(opname : str, arg1 : JSValue, arg2 : JSValue) -> Optional[JSValue]:
    """
    Compute a binary operation on two literal values

    :param str opname: The operator
    :param JSValue arg1: The left operand
    :param JSValue arg2: The right operand
    :rtype Optional[JSValue]:
    :return: The result, or None if the operation is not folded (unknown operator, string operand with an operator other than +)
    """
    if opname not in FOLDABLE_OPERATORS:
        return None

    strings = (arg1 != JSNull and arg1.is_string()) or (arg2 != JSNull and arg2.is_string())
    if strings:
        if opname == "+":
            return JSPrimitive(to_string(arg1) + to_string(arg2))
        return None

    a = to_number(arg1)
    b = to_number(arg2)
    if opname == "+":
        return JSPrimitive(a + b)
    elif opname == "-":
        return JSPrimitive(a - b)
    elif opname == "*":
        return JSPrimitive(a * b)
    elif opname == "/":
        return JSPrimitive(divide(a, b))
    elif opname == "%":
        return JSPrimitive(remainder(a, b))
    elif opname == "**":
        return JSPrimitive(power(a, b))
    elif opname == "|":
        return JSPrimitive(float(to_int32(a) | to_int32(b)))
    elif opname == "&":
        return JSPrimitive(float(to_int32(a) & to_int32(b)))
    elif opname == "^":
        return JSPrimitive(float(to_int32(a) ^ to_int32(b)))
    elif opname == "<<":
        shift = to_uint32(b) & 31
        return JSPrimitive(float(to_int32(float((to_int32(a) << shift) & 0xFFFFFFFF))))
    elif opname == ">>":
        shift = to_uint32(b) & 31
        return JSPrimitive(float(to_int32(a) >> shift))

## String literals

HEX_DIGITS = "0123456789abcdefABCDEF"

def decode_escapes(body : str) -> Tuple[str, bool]:
    """
    Decode the \\xHH and \\uHHHH escapes of a string literal's source text
    (without its quotes). Any other escape sequence, \\\\ included, is copied
    unchanged so that it cannot start a hex or unicode escape.

    :param str body: The literal source text between the quotes
    :rtype Tuple[str, bool]:
    :return: The decoded text, and True if at least one escape was decoded
    """
    out = []
    found = False
    i = 0
    n = len(body)
    while i < n:
        c = body[i]
        if c != "\\" or i + 1 >= n:
            out.append(c)
            i += 1
            continue
        kind = body[i + 1]
        if kind == "x":
            width = 2
        elif kind == "u":
            width = 4
        else:
            out.append(body[i:i + 2])
            i += 2
            continue
        digits = body[i + 2:i + 2 + width]
        if len(digits) == width and all(d in HEX_DIGITS for d in digits):
            out.append(chr(int(digits, 16)))
            found = True
            i += 2 + width
        else:
            out.append(body[i:i + 2])
            i += 2
    return "".join(out), found

ESCAPES = {
    "\\": "\\\\",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
    "\v": "\\v",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}

def quote_string(s : str, quote : str = '"') -> str:
    """
    Render a string value as a JS string literal
    """
    out = [quote]
    for c in s:
        code = ord(c)
        if c == quote:
            out.append("\\" + c)
        elif c in ESCAPES:
            out.append(ESCAPES[c])
        elif code < 0x20 or code == 0x7f:
            out.append("\\x%02x" % code)
        elif 0xd800 <= code <= 0xdfff:
            out.append("\\u%04x" % code)
        else:
            out.append(c)
    out.append(quote)
    return "".join(out)

def decode_base64(payload : str) -> str:
    """
    Decode a base64 payload and interpret it as UTF-8

    :param str payload: The base64 text
    :rtype str:
    :return: The decoded text
    :raises DecodeFailure: if the payload is not valid base64 or not valid UTF-8
    """
    payload = payload.strip()
    if len(payload) % 4 == 1:
        raise DecodeFailure("bad base64 length")
    payload += "=" * (-len(payload) % 4)
    try:
        data = base64.b64decode(payload, validate=True)
        return data.decode("utf-8")
    except (binascii.Error, ValueError) as e:
        raise DecodeFailure(str(e))
