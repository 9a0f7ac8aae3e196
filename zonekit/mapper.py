#
#
#

"""Translation between canonical records and provider JSON shapes.

Decoded JSON is handled as the native union produced by ``json``/``yaml``
(dict, list, str, int, float, bool, None). Navigation and numeric coercion
dispatch on those types; nothing here mutates its inputs.
"""

import math
from copy import deepcopy
from dataclasses import dataclass, field, fields
from numbers import Integral, Real
from typing import Any, Dict, List, Optional

from .exceptions import ConfigurationError, MappingError
from .models import Record

STRING_FIELDS = ('hostname', 'record_type', 'address', 'id', 'target')
INT_FIELDS = ('ttl', 'mx_pref', 'priority', 'weight', 'port')
# Emitted even when empty, providers expect them on every write
ALWAYS_SENT = ('hostname', 'record_type', 'address')
# Output order; later fields win when two canonical fields share a key
FIELD_ORDER = (
    'id',
    'hostname',
    'record_type',
    'address',
    'ttl',
    'mx_pref',
    'priority',
    'weight',
    'port',
    'target',
)


@dataclass(frozen=True)
class FieldMapping:
    """Canonical field name -> provider JSON key, '' when not mapped."""

    hostname: str = ''
    record_type: str = ''
    address: str = ''
    ttl: str = ''
    mx_pref: str = ''
    id: str = ''
    priority: str = ''
    weight: str = ''
    port: str = ''
    target: str = ''

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'FieldMapping':
        data = data or {}
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(
                f'unknown mapping fields: {", ".join(sorted(unknown))}'
            )
        return cls(**{k: str(v or '') for k, v in data.items()})

    def to_dict(self) -> Dict[str, str]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def merged(self, defaults: 'FieldMapping') -> 'FieldMapping':
        """Fill empty keys from ``defaults``."""
        return FieldMapping(
            **{
                f.name: getattr(self, f.name) or getattr(defaults, f.name)
                for f in fields(self)
            }
        )


@dataclass(frozen=True)
class Mappings:
    request: FieldMapping = field(default_factory=FieldMapping)
    response: FieldMapping = field(default_factory=FieldMapping)
    list_path: str = ''
    # Where create/update responses keep the record, '' for the defaults
    response_path: str = ''
    zone_list_path: str = 'zones'
    zone_id: str = 'id'
    zone_name: str = 'name'

    def validate(self) -> None:
        missing = [
            name
            for name in ALWAYS_SENT
            if not getattr(self.response, name)
        ]
        if missing:
            raise ConfigurationError(
                f'response mapping must define {", ".join(missing)}'
            )


def default_mappings() -> Mappings:
    identity = FieldMapping(
        hostname='hostname',
        record_type='record_type',
        address='address',
        ttl='ttl',
        mx_pref='mx_pref',
        id='id',
        priority='priority',
        weight='weight',
        port='port',
        target='target',
    )
    return Mappings(request=identity, response=identity, list_path='records')


def coerce_int(value: Any) -> int:
    """Best effort conversion of a decoded JSON number to ``int``.

    Returns 0 for anything that is not an integral-valued number or a
    numeric string.
    """
    if isinstance(value, bool):
        return 0
    if isinstance(value, Integral):
        return int(value)
    if isinstance(value, Real):
        value = float(value)
        if math.isfinite(value):
            return int(value)
        return 0
    if isinstance(value, str):
        value = value.strip()
        try:
            return int(value)
        except ValueError:
            pass
        try:
            return coerce_int(float(value))
        except ValueError:
            return 0
    return 0


def coerce_str(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def to_provider_format(record: Record, mapping: FieldMapping) -> Dict[str, Any]:
    ret = {}
    for name in FIELD_ORDER:
        key = getattr(mapping, name)
        if not key:
            continue
        value = getattr(record, name)
        if name not in ALWAYS_SENT and not value:
            # zero ints and empty strings are not transmitted
            continue
        ret[key] = value
    return ret


def from_provider_format(
    data: Dict[str, Any], mapping: FieldMapping
) -> Record:
    if not isinstance(data, dict):
        raise MappingError(
            f'cannot map {type(data).__name__} to a record, expected object'
        )

    values = {}
    for name in STRING_FIELDS:
        key = getattr(mapping, name)
        if key:
            values[name] = coerce_str(data.get(key))
    for name in INT_FIELDS:
        key = getattr(mapping, name)
        if key:
            values[name] = coerce_int(data.get(key))

    # Every provider key is kept, mapped or not
    return Record(metadata=dict(data), raw=deepcopy(data), **values)


def has_mapped_fields(data: Any, mapping: FieldMapping) -> bool:
    if not isinstance(data, dict):
        return False
    return any(
        key in data for key in mapping.to_dict().values() if key
    )


def navigate(data: Any, path: str) -> Any:
    """Follow a dotted path through nested objects.

    Returns None when a segment is absent; raises ``MappingError`` when a
    segment would have to pass through a scalar.
    """
    current = data
    for part in path.split('.'):
        if current is None:
            return None
        if isinstance(current, dict):
            current = current.get(part)
        elif isinstance(current, list):
            # arrays terminate navigation
            break
        else:
            raise MappingError(
                f"invalid path '{path}': cannot navigate through "
                f'{type(current).__name__}'
            )
    return current


def extract_records(data: Any, list_path: str) -> List[Dict[str, Any]]:
    if not list_path:
        if isinstance(data, list):
            return _as_objects(data)
        raise MappingError(
            'no list path specified and data is not an array'
        )

    current = navigate(data, list_path)
    if current is None:
        # Providers omit the array entirely for empty zones
        return []
    if not isinstance(current, list):
        raise MappingError(f"path '{list_path}' does not point to an array")
    return _as_objects(current)


def _as_objects(items: List[Any]) -> List[Dict[str, Any]]:
    ret = []
    for item in items:
        if not isinstance(item, dict):
            raise MappingError(f'cannot convert item to object: {item!r}')
        ret.append(item)
    return ret
