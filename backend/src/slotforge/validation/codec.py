"""Options codec for slot attributes.

An attribute's options arrive either already decoded (a mapping, a list of
key/value pairs, or an AttributeOptions record) or in their stored,
serialized form. decode() turns any of these into an AttributeOptions
record; encode() produces the serialized form.

Serialized format (version 1) is UTF-8 JSON:

    {"v": 1, "opts": [["required", true], ["values", [1, 2]]]}

Values JSON cannot represent are written as single-key tagged objects:

    {"$atom": "primary"}
    {"$tuple": [1, 2]}
    {"$map": [[1, "one"], [2, "two"]]}
    {"$struct": "Shop.Address", "fields": {"street": ""}}
"""

import dataclasses
import enum
import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from slotforge.validation.registry import Atom
from slotforge.validation.structs import StructNotFoundError, StructTypeResolver

FORMAT_VERSION = 1

RECOGNIZED_KEYS = ("required", "default", "values", "examples")


class MalformedOptionsError(ValueError):
    """Raised when raw options cannot be decoded.

    This is a precondition failure of the caller's input, not a validation
    error: the options bag itself is corrupt.
    """


class _Missing:
    """Sentinel for an option key that is absent."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


MISSING: Any = _Missing()


@dataclass(frozen=True)
class AttributeOptions:
    """Decoded attribute options.

    Recognized options are explicit fields; a key that was not given is
    MISSING, which is distinct from a key given as None. Unrecognized keys
    are kept in ``extra``. ``key_order`` records the original key order.
    """

    required: Any = MISSING
    default: Any = MISSING
    values: Any = MISSING
    examples: Any = MISSING
    extra: dict[str, Any] = field(default_factory=dict)
    key_order: tuple[str, ...] = ()

    @classmethod
    def from_pairs(cls, pairs: list[tuple[str, Any]]) -> "AttributeOptions":
        recognized: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        order: list[str] = []
        for key, value in pairs:
            if not isinstance(key, str):
                raise MalformedOptionsError(f"option keys must be strings, got {key!r}")
            if key in recognized or key in extra:
                raise MalformedOptionsError(f"duplicate option key '{key}'")
            if key in RECOGNIZED_KEYS:
                recognized[key] = value
            else:
                extra[key] = value
            order.append(key)
        return cls(**recognized, extra=extra, key_order=tuple(order))

    def has(self, key: str) -> bool:
        """True if the key was given, whatever its value."""
        return key in self.key_order

    def get(self, key: str, default: Any = None) -> Any:
        """Value of an option, or ``default`` when absent or None."""
        if key in RECOGNIZED_KEYS:
            value = getattr(self, key)
        else:
            value = self.extra.get(key, MISSING)
        if value is MISSING or value is None:
            return default
        return value

    def items(self) -> list[tuple[str, Any]]:
        """Key/value pairs in original order."""
        result = []
        for key in self.key_order:
            if key in RECOGNIZED_KEYS:
                result.append((key, getattr(self, key)))
            else:
                result.append((key, self.extra[key]))
        return result

    def to_dict(self) -> dict[str, Any]:
        return dict(self.items())

    def __len__(self) -> int:
        return len(self.key_order)


# =============================================================================
# Decoding
# =============================================================================


def decode(raw: Any) -> AttributeOptions:
    """Decode raw options into an AttributeOptions record.

    Args:
        raw: None, an AttributeOptions, a mapping with string keys, a list of
            (key, value) pairs, or the serialized form as bytes or str

    Returns:
        The decoded record. Decoding a record returns it unchanged.

    Raises:
        MalformedOptionsError: If the input cannot be decoded
    """
    if raw is None:
        return AttributeOptions()

    if isinstance(raw, AttributeOptions):
        return raw

    if isinstance(raw, (bytes, bytearray, str)):
        return _decode_serialized(raw)

    if isinstance(raw, Mapping):
        return AttributeOptions.from_pairs(list(raw.items()))

    if isinstance(raw, (list, tuple)):
        pairs = []
        for item in raw:
            if not isinstance(item, (list, tuple)) or len(item) != 2:
                raise MalformedOptionsError(f"expected a (key, value) pair, got {item!r}")
            pairs.append((item[0], item[1]))
        return AttributeOptions.from_pairs(pairs)

    raise MalformedOptionsError(f"unsupported options type {type(raw).__name__}")


def _decode_serialized(raw: bytes | bytearray | str) -> AttributeOptions:
    try:
        text = raw.decode("utf-8") if isinstance(raw, (bytes, bytearray)) else raw
        document = json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as exc:
        raise MalformedOptionsError(f"options are not valid serialized data: {exc}") from exc

    if not isinstance(document, dict) or set(document.keys()) != {"v", "opts"}:
        raise MalformedOptionsError("serialized options must be an object with 'v' and 'opts'")
    if document["v"] != FORMAT_VERSION:
        raise MalformedOptionsError(f"unsupported options format version {document['v']!r}")
    if not isinstance(document["opts"], list):
        raise MalformedOptionsError("'opts' must be a list of pairs")

    pairs = []
    for item in document["opts"]:
        if not isinstance(item, list) or len(item) != 2:
            raise MalformedOptionsError(f"expected a [key, value] pair, got {item!r}")
        pairs.append((item[0], decode_value(item[1])))
    return AttributeOptions.from_pairs(pairs)


def decode_value(value: Any) -> Any:
    """Decode a single JSON-compatible value, resolving tagged forms.

    Raises:
        MalformedOptionsError: If a tagged form is malformed
    """
    try:
        return _from_json(value)
    except RecursionError as exc:
        raise MalformedOptionsError("option value is nested too deeply") from exc


def _from_json(value: Any) -> Any:
    if isinstance(value, list):
        return [_from_json(v) for v in value]
    if not isinstance(value, dict):
        return value

    if "$atom" in value:
        _expect_keys(value, {"$atom"})
        if not isinstance(value["$atom"], str):
            raise MalformedOptionsError("'$atom' must name a string")
        return Atom(value["$atom"])

    if "$tuple" in value:
        _expect_keys(value, {"$tuple"})
        if not isinstance(value["$tuple"], list):
            raise MalformedOptionsError("'$tuple' must be a list")
        return tuple(_from_json(v) for v in value["$tuple"])

    if "$map" in value:
        _expect_keys(value, {"$map"})
        if not isinstance(value["$map"], list):
            raise MalformedOptionsError("'$map' must be a list of entries")
        result = {}
        for item in value["$map"]:
            if not isinstance(item, list) or len(item) != 2:
                raise MalformedOptionsError(f"expected a [key, value] map entry, got {item!r}")
            key = _from_json(item[0])
            try:
                result[key] = _from_json(item[1])
            except TypeError as exc:
                raise MalformedOptionsError(f"unhashable map key {key!r}") from exc
        return result

    if "$struct" in value:
        _expect_keys(value, {"$struct", "fields"})
        return _struct_from_json(value["$struct"], value["fields"])

    for key in value:
        if isinstance(key, str) and key.startswith("$"):
            raise MalformedOptionsError(f"unknown value tag '{key}'")
    return {k: _from_json(v) for k, v in value.items()}


def _expect_keys(value: dict, keys: set[str]) -> None:
    if set(value.keys()) != keys:
        raise MalformedOptionsError(f"malformed tagged value {value!r}")


def _struct_from_json(name: Any, fields: Any) -> Any:
    if not isinstance(name, str) or not isinstance(fields, dict):
        raise MalformedOptionsError("'$struct' needs a name and a 'fields' object")
    try:
        descriptor = StructTypeResolver.resolve(name)
    except StructNotFoundError as exc:
        raise MalformedOptionsError(str(exc)) from exc

    unknown = set(fields) - set(descriptor.fields)
    if unknown:
        raise MalformedOptionsError(
            f"unknown fields for struct {name}: {', '.join(sorted(unknown))}"
        )
    return descriptor.cls(**{k: _from_json(v) for k, v in fields.items()})


# =============================================================================
# Encoding
# =============================================================================


def encode(options: Any) -> bytes:
    """Serialize options (anything decode() accepts) to the stored form.

    Raises:
        MalformedOptionsError: If the options cannot be decoded
        ValueError: If a value has no serialized representation
    """
    document = {"v": FORMAT_VERSION, "opts": dump_options(decode(options))}
    return json.dumps(document, separators=(",", ":")).encode("utf-8")


def dump_options(
    options: AttributeOptions,
    default: Callable[[Any], Any] | None = None,
) -> list[list[Any]]:
    """JSON-compatible [key, value] pairs for decoded options.

    Args:
        options: Decoded options
        default: Called for values with no serialized representation, as with
            ``json.dumps``. Without it such values raise ValueError.
    """
    return [[key, _to_json(value, default)] for key, value in options.items()]


def _to_json(value: Any, default: Callable[[Any], Any] | None = None) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Atom):
        return {"$atom": value.name}
    if isinstance(value, enum.Enum):
        return {"$atom": value.name}
    if isinstance(value, list):
        return [_to_json(v, default) for v in value]
    if isinstance(value, tuple):
        return {"$tuple": [_to_json(v, default) for v in value]}
    if isinstance(value, Mapping):
        if all(isinstance(k, str) and not k.startswith("$") for k in value):
            return {k: _to_json(v, default) for k, v in value.items()}
        return {"$map": [[_to_json(k, default), _to_json(v, default)] for k, v in value.items()]}
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        name = StructTypeResolver.name_for(type(value))
        if name is None:
            if default is not None:
                return default(value)
            raise ValueError(f"{type(value).__qualname__} is not a registered struct")
        return {
            "$struct": name,
            "fields": {
                f.name: _to_json(getattr(value, f.name), default)
                for f in dataclasses.fields(value)
            },
        }
    if default is not None:
        return default(value)
    raise ValueError(f"cannot serialize option value {value!r}")
