"""
Shared value cleaning and type checks used for every declared parameter type.
"""

import re
from typing import Any, Callable, Dict, List

from web3 import Web3

from .models import ParamType

ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")
BYTES_PATTERN = re.compile(r"^0x(?:[0-9a-fA-F]{2})*$")
ZERO_ADDRESS = "0x" + "0" * 40

_STRIP_CHARS = re.compile(r"[\s'\"`]")


def clean_value(raw: str) -> str:
    """Removes whitespace, quotes and backticks that creep into hand-edited .env values."""
    return _STRIP_CHARS.sub("", raw)


def is_blank(raw: Any) -> bool:
    return raw is None or (isinstance(raw, str) and raw.strip() == "")


def coerce_address(raw: Any) -> str:
    if not isinstance(raw, str):
        raise ValueError(f"expected an address string, got {type(raw).__name__}")
    cleaned = clean_value(raw)
    if not ADDRESS_PATTERN.match(cleaned):
        raise ValueError(f"expected 0x-prefixed 20-byte hex address, got '{raw}'")
    body = cleaned[2:]
    if body != body.lower() and body != body.upper() and not Web3.is_checksum_address(cleaned):
        raise ValueError(f"address checksum mismatch for '{cleaned}'")
    return Web3.to_checksum_address(cleaned)


def coerce_integer(raw: Any) -> int:
    if isinstance(raw, bool):
        raise ValueError("expected an integer, got a boolean")
    if isinstance(raw, int):
        return raw
    if not isinstance(raw, str):
        raise ValueError(f"expected an integer, got {type(raw).__name__}")
    cleaned = clean_value(raw)
    try:
        return int(cleaned, 0)
    except ValueError:
        raise ValueError(f"expected a decimal or 0x-hex integer, got '{raw}'") from None


def coerce_string(raw: Any) -> str:
    if not isinstance(raw, str):
        raise ValueError(f"expected a string, got {type(raw).__name__}")
    return raw.strip()


def coerce_bytes(raw: Any) -> bytes:
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw)
    if not isinstance(raw, str):
        raise ValueError(f"expected 0x-prefixed hex bytes, got {type(raw).__name__}")
    cleaned = clean_value(raw)
    if not BYTES_PATTERN.match(cleaned):
        raise ValueError(f"expected 0x-prefixed even-length hex bytes, got '{raw}'")
    return Web3.to_bytes(hexstr=cleaned)


COERCERS: Dict[ParamType, Callable[[Any], Any]] = {
    ParamType.ADDRESS: coerce_address,
    ParamType.INTEGER: coerce_integer,
    ParamType.STRING: coerce_string,
    ParamType.BYTES: coerce_bytes,
}


def coerce(param_type: ParamType, raw: Any) -> Any:
    """Validates `raw` against `param_type`; raises ValueError with the reason on mismatch."""
    return COERCERS[param_type](raw)


def coerce_many(param_type: ParamType, raw: Any) -> List[Any]:
    if isinstance(raw, str):
        items = [item for item in raw.split(",") if item.strip()]
    elif isinstance(raw, (list, tuple)):
        items = list(raw)
    else:
        raise ValueError(f"expected a comma-separated list, got {type(raw).__name__}")
    if not items:
        raise ValueError("expected at least one list item")
    values = []
    for position, item in enumerate(items):
        try:
            values.append(coerce(param_type, item))
        except ValueError as e:
            raise ValueError(f"item {position}: {e}") from None
    return values


def same_address(left: Any, right: Any) -> bool:
    if not isinstance(left, str) or not isinstance(right, str):
        return False
    return left.lower() == right.lower()
