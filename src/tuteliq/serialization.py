"""Wire encoding for request bodies and decoding for API responses.

Requests are snake_case JSON with ISO-8601 dates; responses are decoded into the
dataclasses declared in ``models``/``management`` by walking their type hints.
"""

import dataclasses
import enum
import json
import math
import re
import types
from datetime import date, datetime
from typing import Any, Union, get_args, get_origin, get_type_hints

# Dynamic JSON value used for open-ended fields such as ``metadata``.
# Nested lists/dicts hold JsonValue again; ensure_json_value enforces it.
JsonValue = Union[None, bool, int, float, str, list[Any], dict[str, Any]]

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])|(?<=[A-Z])([A-Z])(?=[a-z])")
_NONE_TYPE = type(None)


def to_snake_case(name: str) -> str:
    """childAge -> child_age; already snake_case names are returned unchanged."""
    return _CAMEL_BOUNDARY.sub(lambda m: "_" + (m.group(1) or m.group(2)), name).lower()


def wire_name(f: dataclasses.Field) -> str:
    return f.metadata.get("key", to_snake_case(f.name))


def ensure_json_value(value: Any, path: str = "$") -> JsonValue:
    """Validate that value is representable as JSON; return it unchanged.

    Raises:
        TypeError: for foreign types or non-string mapping keys
        ValueError: for NaN or infinite floats
    """
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise ValueError(f"{path}: {value!r} is not representable in JSON")
        return value
    if isinstance(value, (list, tuple)):
        for idx, item in enumerate(value):
            ensure_json_value(item, f"{path}[{idx}]")
        return value
    if isinstance(value, dict):
        for k, v in value.items():
            if not isinstance(k, str):
                raise TypeError(f"{path}: JSON object keys must be str, got {type(k).__name__}")
            ensure_json_value(v, f"{path}.{k}")
        return value
    raise TypeError(f"{path}: {type(value).__name__} is not JSON serializable")


def to_wire(value: Any, path: str = "$") -> JsonValue:
    """Convert dataclasses, enums, dates and containers into JSON-native values."""
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        out: dict[str, Any] = {}
        for f in dataclasses.fields(value):
            v = getattr(value, f.name)
            if v is None:
                continue
            out[wire_name(f)] = to_wire(v, f"{path}.{f.name}")
        return out
    if isinstance(value, dict):
        out = {}
        for k, v in value.items():
            if isinstance(k, enum.Enum):
                k = k.value
            if not isinstance(k, str):
                raise TypeError(f"{path}: JSON object keys must be str, got {type(k).__name__}")
            out[k] = to_wire(v, f"{path}.{k}")
        return out
    if isinstance(value, (list, tuple)):
        return [to_wire(v, f"{path}[{i}]") for i, v in enumerate(value)]
    return ensure_json_value(value, path)


def encode_json(value: Any) -> bytes:
    return json.dumps(to_wire(value), separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def parse_datetime(value: str) -> datetime:
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def _is_union(tp) -> bool:
    return get_origin(tp) in (Union, types.UnionType)


def from_wire(tp: Any, data: Any) -> Any:
    """Decode JSON-native data into an instance of tp."""
    if tp is Any or tp == JsonValue:
        return data
    if _is_union(tp):
        if data is None:
            return None
        options = [a for a in get_args(tp) if a is not _NONE_TYPE]
        if len(options) == 1:
            return from_wire(options[0], data)
        return data
    if data is None:
        raise ValueError(f"expected {getattr(tp, '__name__', tp)}, got null")
    if dataclasses.is_dataclass(tp):
        return _decode_dataclass(tp, data)
    origin = get_origin(tp)
    if origin is list:
        (item_tp,) = get_args(tp) or (Any,)
        if not isinstance(data, list):
            raise ValueError(f"expected list, got {type(data).__name__}")
        return [from_wire(item_tp, v) for v in data]
    if origin is dict:
        _, value_tp = get_args(tp) or (str, Any)
        if not isinstance(data, dict):
            raise ValueError(f"expected object, got {type(data).__name__}")
        return {k: from_wire(value_tp, v) for k, v in data.items()}
    if isinstance(tp, type) and issubclass(tp, enum.Enum):
        return tp(data)
    if tp is datetime:
        return parse_datetime(data)
    if tp is float and isinstance(data, (int, float)) and not isinstance(data, bool):
        return float(data)
    if tp in (int, str, bool) and not isinstance(data, tp):
        raise ValueError(f"expected {tp.__name__}, got {type(data).__name__}")
    return data


def _decode_dataclass(tp, data):
    if not isinstance(data, dict):
        raise ValueError(f"expected object for {tp.__name__}, got {type(data).__name__}")
    hints = get_type_hints(tp)
    kwargs = {}
    for f in dataclasses.fields(tp):
        if not f.init:
            continue
        key = wire_name(f)
        if key in data:
            kwargs[f.name] = from_wire(hints[f.name], data[key])
        elif f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
            raise ValueError(f"{tp.__name__}: missing required field '{key}'")
    return tp(**kwargs)


def decode_json(tp: Any, content: Union[bytes, str]) -> Any:
    return from_wire(tp, json.loads(content))
