"""
Variant — Closed tagged unions with a canonical JSON form

Shared machinery for Target and Action:
- each family keeps its own kind -> class registry
- `to_dict()` emits the `kind` tag plus fields (wire names via metadata)
- `key` is compact orjson with sorted keys: byte-identical for equal values
- equality and hashing go through `key`
- `from_dict()` / `from_key()` dispatch through the registry; an unknown
  kind is a SerializationError, never a silent default
"""

from enum import Enum
from dataclasses import fields
from typing import Any, ClassVar, Dict, Type

import orjson

from .errors import SerializationError


class TaggedVariant:
    """Base for one family of tagged variants."""

    kind: ClassVar[str] = ""
    family: ClassVar[str] = "variant"
    registry: ClassVar[Dict[str, Type['TaggedVariant']]] = {}

    @classmethod
    def register(cls, variant):
        """Class decorator adding a variant to this family's registry."""
        if variant.kind in cls.registry:
            raise ValueError(f"duplicate {cls.family} kind: {variant.kind}")
        cls.registry[variant.kind] = variant
        return variant

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {'kind': self.kind}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, tuple):
                value = list(value)
            elif isinstance(value, Enum):
                value = value.value
            d[f.metadata.get('wire', f.name)] = value
        return d

    @property
    def key(self) -> str:
        """Canonical serialized form."""
        try:
            return orjson.dumps(self.to_dict(), option=orjson.OPT_SORT_KEYS).decode()
        except TypeError as e:
            raise SerializationError(f"cannot serialize {self!r}: {e}") from e

    def __eq__(self, other):
        if not isinstance(other, TaggedVariant) or other.family != self.family:
            return NotImplemented
        return self.key == other.key

    def __hash__(self):
        return hash(self.key)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TaggedVariant':
        if not isinstance(data, dict):
            raise SerializationError(f"{cls.family} must be an object, got {type(data).__name__}")
        kind = data.get('kind')
        variant = cls.registry.get(kind)
        if variant is None:
            raise SerializationError(f"unknown {cls.family} kind: {kind!r}")

        wire_to_attr = {f.metadata.get('wire', f.name): f.name for f in fields(variant)}
        kwargs = {}
        for wire_name, value in data.items():
            if wire_name == 'kind':
                continue
            if wire_name not in wire_to_attr:
                raise SerializationError(f"unexpected field {wire_name!r} for {cls.family} {kind}")
            kwargs[wire_to_attr[wire_name]] = value
        try:
            return variant(**kwargs)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"malformed {kind} {cls.family}: {e}") from e

    @classmethod
    def from_key(cls, key: str) -> 'TaggedVariant':
        try:
            data = orjson.loads(key)
        except orjson.JSONDecodeError as e:
            raise SerializationError(f"malformed {cls.family} key: {e}") from e
        return cls.from_dict(data)
