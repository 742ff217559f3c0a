import math
import re
from decimal import Decimal
from typing import Iterable

METRIC_NAMESPACE = "custom.googleapis.com"

_INVALID_CHARS = re.compile(r"[^a-z0-9]+")


def normalize_name(name: str) -> str:
    """Lower-case a name and collapse every run of characters outside [a-z0-9] into one '_'"""
    return _INVALID_CHARS.sub("_", name.lower())


def format_metric_type(prefix: Iterable[str], family_name: str, namespace: str = METRIC_NAMESPACE) -> str:
    segments = [namespace]
    segments.extend(normalize_name(segment) for segment in prefix if segment)
    segments.append(normalize_name(family_name))
    return "/".join(segments)


def format_float(value: float) -> str:
    """Shortest round-trip form of a float label value, as Go's %v prints it.

    Exponent notation is used when the decimal exponent is below -4 or at least
    6: 0.5, 1, 100000, 1e+06, 2.5e+06, 1e-05, +Inf.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    text = repr(float(value))
    if value == 0:
        return text[:-2]

    sign, digits, exponent = Decimal(text).as_tuple()
    exp10 = len(digits) + exponent - 1
    if -4 <= exp10 < 6:
        return text[:-2] if text.endswith(".0") else text

    mantissa = "".join(str(d) for d in digits).rstrip("0")
    if len(mantissa) > 1:
        mantissa = mantissa[0] + "." + mantissa[1:]
    return f"{'-' if sign else ''}{mantissa}e{'-' if exp10 < 0 else '+'}{abs(exp10):02d}"
