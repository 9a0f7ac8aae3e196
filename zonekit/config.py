#
#
#

"""Provider configuration as loaded from YAML or synthesized from OpenAPI.

Example::

    name: cloudflare
    display_name: Cloudflare
    type: rest
    auth:
      method: bearer
      credentials:
        token: ${CF_TOKEN}
    api:
      base_url: https://api.cloudflare.com/client/v4
      endpoints:
        get_records: /zones/{zone_id}/dns_records
      timeout: 30
      retries: 3
    mappings:
      list_path: result
      request: {hostname: name, record_type: type, address: content}
      response: {hostname: name, record_type: type, address: content, id: id}
    settings:
      bulk_replace_order: delete_first
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

import yaml

from .exceptions import ConfigurationError
from .mapper import FieldMapping, Mappings

TYPE_REST = 'rest'

DEFAULT_TIMEOUT = 30
DEFAULT_RETRIES = 3

_MAPPING_KEYS = (
    'request',
    'response',
    'list_path',
    'response_path',
    'zone_list_path',
    'zone_id',
    'zone_name',
)


def _frozen(data: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    return MappingProxyType(dict(data or {}))


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError(
            f'{key} must be a mapping, got {type(value).__name__}'
        )
    return value


@dataclass(frozen=True)
class AuthConfig:
    method: str = ''
    credentials: Mapping[str, Any] = field(default_factory=_frozen)


@dataclass(frozen=True)
class APIConfig:
    base_url: str = ''
    endpoints: Mapping[str, str] = field(default_factory=_frozen)
    headers: Mapping[str, str] = field(default_factory=_frozen)
    timeout: int = DEFAULT_TIMEOUT
    retries: int = DEFAULT_RETRIES


@dataclass(frozen=True)
class Config:
    name: str
    display_name: str = ''
    type: str = TYPE_REST
    auth: AuthConfig = field(default_factory=AuthConfig)
    api: APIConfig = field(default_factory=APIConfig)
    mappings: Mappings = field(default_factory=Mappings)
    settings: Mapping[str, Any] = field(default_factory=_frozen)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Config':
        if not isinstance(data, dict):
            raise ConfigurationError('provider config must be a mapping')
        name = data.get('name')
        if not name:
            raise ConfigurationError('provider name is required')

        auth = _section(data, 'auth')
        api = _section(data, 'api')
        mappings = _section(data, 'mappings')
        unknown = set(mappings) - set(_MAPPING_KEYS)
        if unknown:
            raise ConfigurationError(
                f'unknown mappings keys: {", ".join(sorted(unknown))}'
            )

        try:
            timeout = int(api.get('timeout') or DEFAULT_TIMEOUT)
            retries = int(api.get('retries') or DEFAULT_RETRIES)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f'api.timeout and api.retries must be integers: {e}'
            ) from e

        zone_defaults = Mappings()
        return cls(
            name=str(name),
            display_name=str(data.get('display_name') or name),
            type=str(data.get('type') or TYPE_REST),
            auth=AuthConfig(
                method=str(auth.get('method') or ''),
                credentials=_frozen(_section(auth, 'credentials')),
            ),
            api=APIConfig(
                base_url=str(api.get('base_url') or ''),
                endpoints=_frozen(_section(api, 'endpoints')),
                headers=_frozen(_section(api, 'headers')),
                timeout=timeout,
                retries=retries,
            ),
            mappings=Mappings(
                request=FieldMapping.from_dict(_section(mappings, 'request')),
                response=FieldMapping.from_dict(
                    _section(mappings, 'response')
                ),
                list_path=str(mappings.get('list_path') or ''),
                response_path=str(mappings.get('response_path') or ''),
                zone_list_path=str(
                    mappings.get('zone_list_path')
                    or zone_defaults.zone_list_path
                ),
                zone_id=str(mappings.get('zone_id') or zone_defaults.zone_id),
                zone_name=str(
                    mappings.get('zone_name') or zone_defaults.zone_name
                ),
            ),
            settings=_frozen(_section(data, 'settings')),
        )


def load_config(path: str) -> Config:
    try:
        with open(path) as fh:
            data = yaml.safe_load(fh)
    except OSError as e:
        raise ConfigurationError(f'unable to read {path}: {e}') from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f'unable to parse {path}: {e}') from e
    return Config.from_dict(data)
