"""String helpers: human-readable numbers, printf formatting and C-style parsing."""

from __future__ import annotations

import re

# kilo, Mega, Giga, Tera, Peta, Exa, Zetta, Yotta.  The trailing empty entry
# stands for the terminating slot the unit tables have always carried, so the
# scaling loops run one step past "Y" exactly as before.
_BIG_SI_UNITS = ("k", "M", "G", "T", "P", "E", "Z", "Y", "")
# Kibi, Mebi, Gibi, Tebi, Pebi, Exbi, Zebi, Yobi.
_BIG_IEC_UNITS = ("K", "M", "G", "T", "P", "E", "Z", "Y", "")
# milli, micro, nano, pico, femto, atto, zepto, yocto.
_SMALL_SI_UNITS = ("m", "u", "n", "p", "f", "a", "z", "y", "")

_UNITS_SIZE = len(_BIG_SI_UNITS)

_ULONG_MAX = 2**64 - 1
_LONG_MIN = -(2**63)
_LONG_MAX = 2**63 - 1
_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1

_C_SPACE = " \t\n\v\f\r"
_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def _stream_text(value: object) -> str:
    """Render a value the way a default-configured output stream would."""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        return "%g" % value
    return str(value)


def _exponent_and_mantissa(
    val: float, thresh: float, precision: int, one_k: float
) -> tuple[str, int]:
    sign = ""
    if val < 0:
        sign = "-"
        val = -val

    # Never exclude values that cannot be rendered in `precision` digits.
    adjusted_threshold = max(thresh, 1.0 / 10.0**precision)
    big_threshold = adjusted_threshold * one_k
    small_threshold = adjusted_threshold
    # Values in ]simple_threshold, small_threshold[ are printed as-is.
    simple_threshold = 0.01

    if val > big_threshold:
        scaled = val
        for i in range(_UNITS_SIZE):
            scaled /= one_k
            if scaled <= big_threshold:
                return sign + _stream_text(scaled), i + 1
    elif val < small_threshold and val < simple_threshold:
        scaled = val
        for i in range(_UNITS_SIZE):
            scaled *= one_k
            if scaled >= small_threshold:
                return sign + _stream_text(scaled), -(i + 1)
    return sign + _stream_text(float(val)), 0


def _exponent_to_prefix(exponent: int, iec: bool) -> str:
    if exponent == 0:
        return ""
    index = exponent - 1 if exponent > 0 else -exponent - 1
    if index >= _UNITS_SIZE:
        return ""
    if exponent > 0:
        table = _BIG_IEC_UNITS if iec else _BIG_SI_UNITS
    else:
        table = _SMALL_SI_UNITS
    return table[index] + "i" if iec else table[index]


def _to_binary_string(
    value: float, threshold: float, precision: int, one_k: float = 1024.0
) -> str:
    mantissa, exponent = _exponent_and_mantissa(
        float(value), threshold, precision, one_k
    )
    return mantissa + _exponent_to_prefix(exponent, False)


def human_readable_number(n: float, one_k: float = 1024.0) -> str:
    """Render ``n`` with an SI prefix, e.g. ``2048`` becomes ``2k``.

    Figures up to 1.1 of the next unit stay in the unit below, and one
    decimal place of precision is kept.
    """
    return _to_binary_string(n, 1.1, 1, one_k)


def human_readable_int(n: int) -> str:
    """Render an integer rounded down to the nearest SI prefix."""
    return _to_binary_string(n, 1.0, 0)


_PRINTF_SPEC = re.compile(
    r"%([-+ #0]*(?:\*|\d+)?(?:\.(?:\*|\d+))?)(?:hh|h|ll|l|L|q|j|z|t)?"
    r"([diouxXeEfFgGcs%])"
)


def str_format(fmt: str, *args: object) -> str:
    """Format ``args`` with a printf-style format string."""
    python_fmt = _PRINTF_SPEC.sub(lambda m: "%" + m.group(1) + m.group(2), fmt)
    return python_fmt % args


def str_cat(*args: object) -> str:
    """Concatenate the stream renderings of ``args``."""
    return "".join(_stream_text(arg) for arg in args)


def str_split(text: str, delim: str) -> list[str]:
    """Split ``text`` on ``delim``; an empty string gives an empty list."""
    if not text:
        return []
    return text.split(delim)


def _digit_value(ch: str) -> int:
    index = _DIGITS.find(ch.lower())
    return index if index >= 0 else len(_DIGITS)


def _scan_integer(text: str, base: int) -> int:
    """Parse the longest integer prefix of ``text`` the way strtol does."""
    if base != 0 and not 2 <= base <= 36:
        raise ValueError(f"invalid base {base}")
    size = len(text)
    i = 0
    while i < size and text[i] in _C_SPACE:
        i += 1
    negative = False
    if i < size and text[i] in "+-":
        negative = text[i] == "-"
        i += 1

    has_hex_prefix = (
        text[i : i + 2].lower() == "0x"
        and i + 2 < size
        and _digit_value(text[i + 2]) < 16
    )
    if base in (0, 16) and has_hex_prefix:
        i += 2
        base = 16
    elif base == 0:
        base = 8 if text[i : i + 1] == "0" else 10

    start = i
    value = 0
    while i < size and (digit := _digit_value(text[i])) < base:
        value = value * base + digit
        i += 1
    if i == start:
        raise ValueError(f"stoul failed: {text} is not an integer")
    return -value if negative else value


def parse_unsigned(text: str, base: int = 10) -> int:
    """Parse an unsigned long; a leading minus wraps modulo 2**64."""
    value = _scan_integer(text, base)
    if abs(value) > _ULONG_MAX:
        raise OverflowError(
            f"stoul failed: {text} is outside of range of unsigned long"
        )
    return value % (_ULONG_MAX + 1)


def parse_int(text: str, base: int = 10) -> int:
    """Parse an int, rejecting values outside the 32-bit range."""
    value = _scan_integer(text, base)
    if not _LONG_MIN <= value <= _LONG_MAX or not _INT_MIN <= value <= _INT_MAX:
        raise OverflowError(f"stoul failed: {text} is outside of range of int")
    return value


_FLOAT_PREFIX = re.compile(
    r"""[ \t\n\r\f\v]*
    (?P<number>[+-]?(?:
        0x(?:[0-9a-f]+\.?[0-9a-f]*|\.[0-9a-f]+)(?:p[+-]?\d+)?
      | (?:\d+\.?\d*|\.\d+)(?:e[+-]?\d+)?
      | inf(?:inity)?
      | nan(?:\([0-9a-z_]*\))?
    ))""",
    re.VERBOSE | re.IGNORECASE,
)


def parse_float(text: str) -> float:
    """Parse the longest floating-point prefix of ``text`` like strtod."""
    match = _FLOAT_PREFIX.match(text)
    if match is None:
        raise ValueError(f"stoul failed: {text} is not an integer")
    literal = match.group("number")
    lowered = literal.lower()
    unsigned = lowered.lstrip("+-")

    if unsigned.startswith("nan"):
        return float("nan") if not lowered.startswith("-") else -float("nan")
    if unsigned.startswith("inf"):
        return float(lowered.split("n", 1)[0] + "nf")

    range_error = OverflowError(f"stoul failed: {text} is outside of range of int")
    if unsigned.startswith("0x"):
        mantissa = unsigned[2:].split("p", 1)[0]
        try:
            result = float.fromhex(literal)
        except OverflowError:
            raise range_error from None
    else:
        mantissa = unsigned.split("e", 1)[0]
        result = float(literal)

    if result in (float("inf"), float("-inf")):
        raise range_error
    if result == 0.0 and re.search(r"[1-9a-f]", mantissa):
        raise range_error
    return result