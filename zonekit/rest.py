#
#
#

import logging
import re
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence

from .clients import Transport
from .context import ensure
from .exceptions import (
    APIError,
    ConfigurationError,
    InvalidInputError,
    MappingError,
    NotFoundError,
    UnauthorizedError,
    UnsupportedOperationError,
)
from .mapper import (
    Mappings,
    coerce_str,
    extract_records,
    from_provider_format,
    has_mapped_fields,
    navigate,
    to_provider_format,
)
from .models import DEFAULT_RECORD_TYPES, Capabilities, Record, Zone
from .provider import Provider
from .strategies import ORDER_DELETE_FIRST, strategy_for

ENDPOINT_KEYS = (
    'list_zones',
    'get_zone',
    'get_records',
    'create_record',
    'update_record',
    'delete_record',
    'bulk_replace_records',
)

RECORD_ID_TOKENS = ('record_id', 'id', 'recordId', 'dns_record_id')
# Envelopes providers commonly wrap single objects in
RECORD_ENVELOPES = ('result', 'data')
ZONE_ENVELOPES = ('result', 'data', 'zone', 'domain')

_TOKEN = re.compile(r'\{([^{}]+)\}')


def render_endpoint(
    template: str,
    zone_id: str = '',
    domain: str = '',
    record_id: str = '',
) -> str:
    '''
    Substitute placeholder tokens in an endpoint template.

    ``{zone_id}`` and ``{domain}`` take the zone, ``{record_id}``, ``{id}``
    and any other token naming a record take the record id. Remaining
    tokens, as found in OpenAPI derived paths (``{zone_identifier}``), are
    bound to the zone.
    '''
    domain = domain or zone_id

    def _sub(match):
        token = match.group(1)
        if token == 'zone_id':
            return zone_id
        if token == 'domain':
            return domain
        if token in RECORD_ID_TOKENS or 'record' in token.lower():
            if not record_id:
                raise InvalidInputError(
                    'record_id',
                    f'record ID is required for endpoint {template}',
                )
            return record_id
        return zone_id

    return _TOKEN.sub(_sub, template)


def _normalize_zone_name(name: str) -> str:
    return (name or '').rstrip('.').lower()


@contextmanager
def _tagged(operation: str):
    '''Re-raise transport errors under the provider operation name.'''
    try:
        yield
    except UnauthorizedError as e:
        raise UnauthorizedError(operation) from e
    except APIError as e:
        raise APIError(operation, e.message, status_code=e.status_code) from e


class RestProvider(Provider):
    '''
    Provider driven entirely by an endpoint template map and field
    mappings.

    Capabilities are inferred once at construction: record ids are
    supported when the response mapping names an id key, zone discovery
    when a ``list_zones`` endpoint exists, atomic bulk replace when a
    ``bulk_replace_records`` endpoint exists. Without a native bulk
    endpoint ``bulk_replace_records`` falls back to a sequential
    delete/create strategy, ordered by ``settings['bulk_replace_order']``.
    '''

    def __init__(
        self,
        name: str,
        client: Transport,
        mappings: Mappings,
        endpoints: Dict[str, str],
        settings: Optional[Dict[str, Any]] = None,
        capabilities: Optional[Capabilities] = None,
        strategy=None,
    ):
        self.log = logging.getLogger(f'{self.__class__.__name__}[{name}]')
        self.log.debug(
            '__init__: name=%s, endpoints=%s', name, sorted(endpoints or {})
        )
        self._name = name
        self._client = client
        self._mappings = mappings
        self._endpoints = dict(endpoints or {})
        self._settings = dict(settings or {})
        if strategy is None:
            strategy = strategy_for(
                self._settings.get('bulk_replace_order', ORDER_DELETE_FIRST)
            )
        self._strategy = strategy
        self._capabilities = capabilities or self._infer_capabilities()

    def _infer_capabilities(self) -> Capabilities:
        supports_record_id = bool(self._mappings.response.id)
        native_bulk = bool(self._endpoints.get('bulk_replace_records'))
        return Capabilities(
            supports_record_id=supports_record_id,
            # the fallback can only remove records it can address by id
            supports_bulk_replace=native_bulk or supports_record_id,
            supports_zone_discovery=bool(self._endpoints.get('list_zones')),
            is_bulk_replace_atomic=native_bulk,
            supported_record_types=tuple(
                self._settings.get('record_types') or DEFAULT_RECORD_TYPES
            ),
        )

    @property
    def name(self):
        return self._name

    @property
    def client(self):
        return self._client

    @property
    def mappings(self) -> Mappings:
        return self._mappings

    @property
    def endpoints(self) -> Dict[str, str]:
        return dict(self._endpoints)

    @property
    def settings(self) -> Dict[str, Any]:
        return dict(self._settings)

    def capabilities(self):
        return self._capabilities

    # --- Endpoints -----------------------------------------------------------

    def has_endpoint(self, key: str) -> bool:
        return bool(self._endpoints.get(key))

    def endpoint(self, key, zone_id='', record_id='', domain=''):
        template = self._endpoints.get(key)
        if not template:
            raise ConfigurationError(
                f'{key} endpoint not configured for {self._name}'
            )
        return render_endpoint(
            template, zone_id=zone_id, domain=domain, record_id=record_id
        )

    # --- Zones ---------------------------------------------------------------

    def _zone_from(self, data: Dict[str, Any]) -> Optional[Zone]:
        name = coerce_str(data.get(self._mappings.zone_name))
        if not name:
            return None
        zone_id = coerce_str(data.get(self._mappings.zone_id)) or name
        return Zone(id=zone_id, name=name, metadata=dict(data))

    def _unwrap_zone(self, data: Any) -> Optional[Dict[str, Any]]:
        if not isinstance(data, dict):
            return None
        keys = (self._settings.get('zone_response_path'),) + ZONE_ENVELOPES
        for key in keys:
            if key and isinstance(data.get(key), dict):
                return data[key]
        return data

    def list_zones(self, ctx=None):
        if not self.has_endpoint('list_zones'):
            raise UnsupportedOperationError('zone listing', self._name)
        with _tagged('list_zones'):
            data = self._client.get(self.endpoint('list_zones'), ctx=ctx)
        zones = []
        for item in extract_records(data, self._mappings.zone_list_path):
            zone = self._zone_from(item)
            if zone is None:
                self.log.debug('list_zones: skipping zone without a name')
                continue
            zones.append(zone)
        self.log.debug('list_zones: found %d zones', len(zones))
        return zones

    def _match_zone(self, zones: List[Zone], name: str) -> Optional[Zone]:
        wanted = _normalize_zone_name(name)
        for zone in zones:
            if _normalize_zone_name(zone.name) == wanted:
                return zone
        return None

    def get_zone(self, name, ctx=None):
        self.log.debug('get_zone: name=%s', name)
        if self.has_endpoint('get_zone'):
            try:
                data = self._client.get(
                    self.endpoint('get_zone', zone_id=name, domain=name),
                    ctx=ctx,
                )
                zone = self._zone_from(self._unwrap_zone(data) or {})
                if zone is not None:
                    return zone
            except (NotFoundError, APIError) as e:
                if not self.has_endpoint('list_zones'):
                    raise NotFoundError('zone', name) from e
                self.log.debug('get_zone: direct lookup failed, %s', e)
        elif not self.has_endpoint('list_zones'):
            raise UnsupportedOperationError('zone lookup', self._name)

        zone = self._match_zone(self.list_zones(ctx=ctx), name)
        if zone is None:
            raise NotFoundError('zone', name)
        return zone

    def resolve_zone_id(self, domain: str, ctx=None) -> str:
        '''
        Zone id for ``domain``.

        An explicit ``settings['zone_id']`` wins. Otherwise the zone is
        looked up and, when that fails, the domain itself is used since many
        providers key zones by name.
        '''
        zone_id = self._settings.get('zone_id')
        if zone_id:
            return str(zone_id)
        try:
            return self.get_zone(domain, ctx=ctx).id
        except (
            APIError,
            MappingError,
            NotFoundError,
            UnsupportedOperationError,
        ) as e:
            self.log.debug(
                'resolve_zone_id: falling back to domain %s, %s', domain, e
            )
        return domain

    # --- Records -------------------------------------------------------------

    def _request_body(self, record: Record) -> Dict[str, Any]:
        return to_provider_format(record, self._mappings.request)

    def _parse_record(self, data: Dict[str, Any]) -> Record:
        return from_provider_format(data, self._mappings.response)

    def list_records(self, zone_id, ctx=None):
        with _tagged('list_records'):
            data = self._client.get(
                self.endpoint('get_records', zone_id=zone_id), ctx=ctx
            )
        records = [
            self._parse_record(item)
            for item in extract_records(data, self._mappings.list_path)
        ]
        self.log.debug(
            'list_records: zone_id=%s, found %d records',
            zone_id,
            len(records),
        )
        return records

    def _unwrap_record(self, data: Any) -> Optional[Dict[str, Any]]:
        response = self._mappings.response
        paths = (self._mappings.response_path,) + RECORD_ENVELOPES
        for path in paths:
            if not path:
                continue
            try:
                candidate = navigate(data, path)
            except MappingError:
                continue
            if has_mapped_fields(candidate, response):
                return candidate
        if has_mapped_fields(data, response):
            return data
        return None

    def _record_from_response(self, data: Any, sent: Record) -> Record:
        '''
        Map a create/update response back to a record.

        Responses that cannot be unwrapped degrade to the record that was
        sent; fields the provider left out are filled from it.
        '''
        candidate = self._unwrap_record(data)
        if candidate is None:
            self.log.debug('_record_from_response: no record in response')
            return sent
        received = self._parse_record(candidate)
        fill = {}
        for name in (
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
        ):
            if not getattr(received, name) and getattr(sent, name):
                fill[name] = getattr(sent, name)
        return received.evolve(**fill) if fill else received

    def _require_record_ids(self, operation: str, record_id: str) -> None:
        if not self._capabilities.supports_record_id:
            raise UnsupportedOperationError(operation, self._name)
        if not record_id:
            raise InvalidInputError('record_id', 'record ID is required')

    def create_record(self, zone_id, record, ctx=None):
        self.log.debug(
            'create_record: zone_id=%s, type=%s, name=%s',
            zone_id,
            record.record_type,
            record.hostname,
        )
        body = self._request_body(record)
        with _tagged('create_record'):
            data = self._client.post(
                self.endpoint('create_record', zone_id=zone_id), body, ctx=ctx
            )
        return self._record_from_response(data, record)

    def update_record(self, zone_id, record_id, record, ctx=None):
        self._require_record_ids('update by ID', record_id)
        self.log.debug(
            'update_record: zone_id=%s, record_id=%s', zone_id, record_id
        )
        record = record.evolve(id=record_id)
        body = self._request_body(record)
        path = self.endpoint(
            'update_record', zone_id=zone_id, record_id=record_id
        )
        with _tagged('update_record'):
            if self._settings.get('update_method', 'PUT').upper() == 'PATCH':
                data = self._client.patch(path, body, ctx=ctx)
            else:
                data = self._client.put(path, body, ctx=ctx)
        return self._record_from_response(data, record)

    def delete_record(self, zone_id, record_id, ctx=None):
        self._require_record_ids('delete by ID', record_id)
        self.log.debug(
            'delete_record: zone_id=%s, record_id=%s', zone_id, record_id
        )
        with _tagged('delete_record'):
            self._client.delete(
                self.endpoint(
                    'delete_record', zone_id=zone_id, record_id=record_id
                ),
                ctx=ctx,
            )

    def bulk_replace_records(
        self, zone_id: str, records: Sequence[Record], ctx=None
    ):
        ctx = ensure(ctx)
        records = list(records)
        self.log.debug(
            'bulk_replace_records: zone_id=%s, len(records)=%d',
            zone_id,
            len(records),
        )
        if self.has_endpoint('bulk_replace_records'):
            body = [self._request_body(r) for r in records]
            with _tagged('bulk_replace_records'):
                self._client.put(
                    self.endpoint('bulk_replace_records', zone_id=zone_id),
                    body,
                    ctx=ctx,
                )
            return
        if not self._capabilities.supports_bulk_replace:
            raise UnsupportedOperationError('bulk replace', self._name)
        self._strategy.apply(self, zone_id, records, ctx)

    def validate(self):
        if self._client is None:
            raise ConfigurationError('HTTP client is not initialized')
        if not self._name:
            raise ConfigurationError('provider name is empty')
        if not self._endpoints:
            raise ConfigurationError('no endpoints configured')
        unknown = set(self._endpoints) - set(ENDPOINT_KEYS)
        if unknown:
            self.log.warning(
                'validate: ignoring unknown endpoints %s', sorted(unknown)
            )
        self._mappings.validate()
