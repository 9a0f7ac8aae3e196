#
#
#

"""Synthesize a provider ``Config`` from an OpenAPI (or Swagger 2) document.

The result is a best-effort starting point: endpoints are classified from
operation ids and HTTP verbs, authentication from the declared security
schemes and field mappings from record-like schemas. Anything that cannot
be inferred is left empty for the user to fill in.
"""

import logging
import os
import re
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .config import DEFAULT_RETRIES, DEFAULT_TIMEOUT, TYPE_REST, Config
from .exceptions import ConfigurationError

SPEC_FILE_NAMES = (
    'openapi.yaml',
    'openapi.yml',
    'openapi.json',
    'swagger.yaml',
    'swagger.yml',
    'swagger.json',
)

HTTP_METHODS = ('get', 'post', 'put', 'patch', 'delete')

# operationId keywords -> endpoint key, checked in order
OPERATION_KEYWORDS = (
    (('list', 'get'), 'get_records'),
    (('create', 'add'), 'create_record'),
    (('update', 'modify'), 'update_record'),
    (('delete', 'remove'), 'delete_record'),
)
METHOD_ENDPOINTS = {
    'get': 'get_records',
    'post': 'create_record',
    'put': 'update_record',
    'patch': 'update_record',
    'delete': 'delete_record',
}
ZONE_COLLECTIONS = ('zones', 'domains')

# lowercased schema property -> canonical fields it feeds
FIELD_SYNONYMS = {
    'name': ('hostname',),
    'hostname': ('hostname',),
    'host': ('hostname',),
    'type': ('record_type',),
    'recordtype': ('record_type',),
    'record_type': ('record_type',),
    'content': ('address',),
    'data': ('address',),
    'value': ('address',),
    'address': ('address',),
    'ttl': ('ttl',),
    'preference': ('mx_pref',),
    'mxpref': ('mx_pref',),
    'mx_pref': ('mx_pref',),
    'priority': ('priority', 'mx_pref'),
    'id': ('id',),
    'recordid': ('id',),
    'record_id': ('id',),
    '_id': ('id',),
    'weight': ('weight',),
    'port': ('port',),
    'target': ('target',),
}

_PARAM = re.compile(r'\{[^{}]+\}')


def _is_record_path(path: str) -> bool:
    path = path.lower()
    return 'record' in path or 'dns' in path


def _env_name(scheme: str) -> str:
    return re.sub(r'\W', '_', scheme).upper()


def _mapping(value: Any, where: str) -> Dict[str, Any]:
    '''
    ``value`` when it is a mapping, {} when absent.

    :raises ConfigurationError: for any other shape
    '''
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError(
            f'OpenAPI {where} must be a mapping, got {type(value).__name__}'
        )
    return value


def path_rank(path: str) -> Tuple[bool, int, int, str]:
    '''
    Sort key choosing between paths competing for the same endpoint:
    parameterless paths first, then fewer parameters, then shorter, then
    lexical order.
    '''
    params = len(_PARAM.findall(path))
    return (params > 0, params, len(path), path)


def classify_operation(method: str, operation_id: str, path: str) -> str:
    '''
    Endpoint key for an operation, '' when it is not DNS related.
    '''
    method = method.lower()
    lowered = path.lower()
    if _is_record_path(lowered):
        operation_id = (operation_id or '').lower()
        for keywords, key in OPERATION_KEYWORDS:
            if any(k in operation_id for k in keywords):
                return key
        return METHOD_ENDPOINTS.get(method, '')

    if method == 'get':
        segments = [s for s in lowered.strip('/').split('/') if s]
        if segments and segments[-1] in ZONE_COLLECTIONS:
            return 'list_zones'
        if (
            len(segments) >= 2
            and _PARAM.fullmatch(segments[-1])
            and segments[-2] in ZONE_COLLECTIONS
        ):
            return 'get_zone'
    return ''


class OpenAPISpec(object):
    '''
    Read-only view of an OpenAPI 3 or Swagger 2 document.

    The sections inference walks are shape checked up front, a malformed
    document raises ``ConfigurationError`` from the constructor.
    '''

    def __init__(self, data: Dict[str, Any]):
        if not isinstance(data, dict):
            raise ConfigurationError('OpenAPI document must be a mapping')
        self.data = data
        info = _mapping(data.get('info'), 'info')
        self.title = str(info.get('title') or '')
        self.version = str(info.get('version') or '')
        self.log = logging.getLogger(f'OpenAPISpec[{self.title}]')

        self.components = _mapping(data.get('components'), 'components')
        self.paths = _mapping(data.get('paths'), 'paths')
        # Swagger 2 keeps these at the top level
        self.schemas = _mapping(
            self.components.get('schemas') or data.get('definitions'),
            'schemas',
        )
        self.security_schemes = _mapping(
            self.components.get('securitySchemes')
            or data.get('securityDefinitions'),
            'security schemes',
        )

    @property
    def base_url(self) -> str:
        servers = self.data.get('servers')
        for server in servers if isinstance(servers, list) else ():
            if isinstance(server, dict) and server.get('url'):
                return str(server['url'])
        host = self.data.get('host')
        if host:
            schemes = self.data.get('schemes')
            if not isinstance(schemes, list) or not schemes:
                schemes = ['https']
            base_path = self.data.get('basePath') or ''
            return f'{schemes[0]}://{host}{base_path}'
        return ''

    def operations(self):
        for path in sorted(self.paths, key=str):
            item = self.paths[path]
            if not isinstance(item, dict):
                continue
            for method in HTTP_METHODS:
                operation = item.get(method)
                if not isinstance(operation, dict):
                    continue
                yield str(path), method, str(operation.get('operationId') or '')

    def extract_endpoints(self) -> Dict[str, str]:
        candidates: Dict[str, List[str]] = {}
        for path, method, operation_id in self.operations():
            key = classify_operation(method, operation_id, path)
            if not key:
                continue
            paths = candidates.setdefault(key, [])
            if path not in paths:
                paths.append(path)

        endpoints = {}
        for key, paths in sorted(candidates.items()):
            paths = sorted(paths, key=path_rank)
            if len(paths) > 1:
                self.log.warning(
                    'extract_endpoints: %s is ambiguous, using %s over %s',
                    key,
                    paths[0],
                    ', '.join(paths[1:]),
                )
            endpoints[key] = paths[0]
        return endpoints

    def extract_auth(self) -> Tuple[str, Dict[str, str]]:
        for key in sorted(self.security_schemes, key=str):
            scheme = self.security_schemes[key]
            name = str(key)
            if not isinstance(scheme, dict):
                continue
            kind = str(scheme.get('type') or '').lower()
            env = _env_name(name)
            if kind == 'apikey':
                if scheme.get('in') != 'header':
                    self.log.debug(
                        'extract_auth: skipping %s, key not sent in a header',
                        name,
                    )
                    continue
                credentials = {'api_key': f'${{{env}_API_KEY}}'}
                if scheme.get('name'):
                    credentials['header'] = str(scheme['name'])
                return 'api_key', credentials
            if kind == 'http':
                http_scheme = str(scheme.get('scheme') or '').lower()
                if http_scheme == 'bearer':
                    return 'bearer', {'token': f'${{{env}_API_TOKEN}}'}
                if http_scheme == 'basic':
                    return 'basic', {
                        'username': f'${{{env}_USERNAME}}',
                        'password': f'${{{env}_PASSWORD}}',
                    }
            if kind == 'basic':
                return 'basic', {
                    'username': f'${{{env}_USERNAME}}',
                    'password': f'${{{env}_PASSWORD}}',
                }
            if kind == 'oauth2':
                return 'oauth', {'token': f'${{{env}_OAUTH_TOKEN}}'}
        return '', {}

    def _properties(self, name) -> Dict[str, Any]:
        schema = self.schemas[name]
        if not isinstance(schema, dict):
            return {}
        return _mapping(schema.get('properties'), f'{name} properties')

    def _record_schema(self) -> Tuple[str, Dict[str, str]]:
        best_name, best_fields = '', {}
        for name in sorted(self.schemas, key=str):
            lowered = str(name).lower()
            if 'record' not in lowered and 'dns' not in lowered:
                continue
            fields = {}
            for prop in self._properties(name):
                prop = str(prop)
                for canonical in FIELD_SYNONYMS.get(prop.lower(), ()):
                    fields.setdefault(canonical, prop)
            if len(fields) > len(best_fields):
                best_name, best_fields = str(name), fields
        return best_name, best_fields

    def _list_path(self, record_schema: str) -> str:
        suffix = f'/{record_schema}'.lower()
        for name in sorted(self.schemas, key=str):
            if str(name) == record_schema:
                continue
            properties = self._properties(name)
            for prop in sorted(properties, key=str):
                definition = properties[prop]
                if not isinstance(definition, dict):
                    continue
                if definition.get('type') != 'array':
                    continue
                items = _mapping(
                    definition.get('items'), f'{name}.{prop} items'
                )
                if str(items.get('$ref', '')).lower().endswith(suffix):
                    return str(prop)
        return ''

    def extract_mappings(self) -> Dict[str, Any]:
        record_schema, fields = self._record_schema()
        if not record_schema:
            return {}
        self.log.debug(
            'extract_mappings: record schema=%s, fields=%s',
            record_schema,
            sorted(fields),
        )
        ret = {'request': dict(fields), 'response': dict(fields)}
        list_path = self._list_path(record_schema)
        if list_path:
            ret['list_path'] = list_path
        return ret

    def to_provider_config(self, name: str) -> Config:
        method, credentials = self.extract_auth()
        return Config.from_dict(
            {
                'name': name,
                'display_name': self.title or name,
                'type': TYPE_REST,
                'auth': {'method': method, 'credentials': credentials},
                'api': {
                    'base_url': self.base_url,
                    'endpoints': self.extract_endpoints(),
                    'timeout': DEFAULT_TIMEOUT,
                    'retries': DEFAULT_RETRIES,
                },
                'mappings': self.extract_mappings(),
            }
        )


def load_spec(path: str) -> OpenAPISpec:
    # JSON is a subset of YAML, one parser covers both
    try:
        with open(path) as fh:
            data = yaml.safe_load(fh)
    except OSError as e:
        raise ConfigurationError(
            f'failed to read OpenAPI spec {path}: {e}'
        ) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f'failed to parse OpenAPI spec {path}: {e}'
        ) from e
    return OpenAPISpec(data)


def find_spec_file(directory: str) -> Optional[str]:
    for name in SPEC_FILE_NAMES:
        path = os.path.join(directory, name)
        if os.path.isfile(path):
            return path
    return None
