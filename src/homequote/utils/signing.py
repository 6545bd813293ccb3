"""
Signed request generation for the Kanda finance widget
"""
import base64
import hashlib
import hmac
import json
import math
from decimal import Decimal
from typing import Any


def _js_number(value: float) -> str:
    """Shortest round-trip digits, laid out the way JavaScript's Number#toString does"""
    if not math.isfinite(value):
        return "null"
    if value == 0:
        return "0"
    sign, raw_digits, exponent = Decimal(repr(value)).as_tuple()
    # n is the position of the decimal point relative to the first digit
    n = exponent + len(raw_digits)
    digits = "".join(str(d) for d in raw_digits).rstrip("0")
    k = len(digits)
    prefix = "-" if sign else ""

    if k <= n <= 21:
        return prefix + digits + "0" * (n - k)
    if 0 < n <= 21:
        return prefix + digits[:n] + "." + digits[n:]
    if -6 < n <= 0:
        return prefix + "0." + "0" * -n + digits
    e = n - 1
    mantissa = digits if k == 1 else f"{digits[0]}.{digits[1:]}"
    return f"{prefix}{mantissa}e{'+' if e > 0 else '-'}{abs(e)}"


def _compact_json(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _js_number(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, dict):
        items = (f"{json.dumps(str(k), ensure_ascii=False)}:{_compact_json(v)}" for k, v in value.items())
        return "{" + ",".join(items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_compact_json(v) for v in value) + "]"
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def format_body(payload: Any) -> str:
    """
    Compact JSON with a space after every `,"` and `":` sequence.

    The substitution is textual, so it also applies inside string values.
    """
    body = _compact_json(payload)
    return body.replace(',"', ', "').replace('":', '": ')


def sign_request(payload: Any, enterprise_id: str) -> str:
    """
    Build "<hex HMAC-SHA256 of the body>.<base64 body>", keyed by the enterprise id.

    Args:
        payload: Any JSON-serializable value
        enterprise_id: Kanda enterprise identifier used as the HMAC key

    Returns:
        The signed request string
    """
    body = format_body(payload).encode("utf-8")
    signature = hmac.new(enterprise_id.encode("utf-8"), body, hashlib.sha256).hexdigest()
    encoded = base64.b64encode(body).decode("ascii")
    return f"{signature}.{encoded}"
