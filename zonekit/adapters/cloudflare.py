#
#
#

from ..clients import Transport
from ..mapper import FieldMapping, Mappings, coerce_int, coerce_str
from ..models import RECORD_TYPE_SRV
from ..rest import RestProvider
from . import require_client

NAME = 'cloudflare'
BASE_URL = 'https://api.cloudflare.com/client/v4'

FIELDS = FieldMapping(
    id='id',
    hostname='name',
    record_type='type',
    address='content',
    ttl='ttl',
    mx_pref='priority',
    priority='priority',
    weight='weight',
    port='port',
    target='target',
)

MAPPINGS = Mappings(
    request=FIELDS,
    response=FIELDS,
    list_path='result',
    response_path='result',
    zone_list_path='result',
)

ENDPOINTS = {
    'list_zones': '/zones',
    'get_records': '/zones/{zone_id}/dns_records',
    'create_record': '/zones/{zone_id}/dns_records',
    'update_record': '/zones/{zone_id}/dns_records/{id}',
    'delete_record': '/zones/{zone_id}/dns_records/{id}',
}

SRV_DATA_FIELDS = ('priority', 'weight', 'port', 'target')


class CloudflareProvider(RestProvider):
    '''
    Cloudflare v4 API.

    SRV records carry their components in a nested ``data`` object, they
    are flattened onto the canonical record when read and nested again
    when written.
    '''

    def __init__(self, client: Transport, settings=None):
        super().__init__(NAME, client, MAPPINGS, ENDPOINTS, settings)

    def _request_body(self, record):
        body = super()._request_body(record)
        if record.record_type == RECORD_TYPE_SRV:
            body['data'] = {
                'priority': record.priority,
                'weight': record.weight,
                'port': record.port,
                'target': record.target,
            }
            for key in ('weight', 'port', 'target'):
                body.pop(key, None)
        return body

    def _parse_record(self, data):
        record = super()._parse_record(data)
        nested = data.get('data')
        if record.record_type != RECORD_TYPE_SRV or not isinstance(
            nested, dict
        ):
            return record
        fill = {}
        for name in SRV_DATA_FIELDS:
            if getattr(record, name) or name not in nested:
                continue
            if name == 'target':
                fill[name] = coerce_str(nested[name])
            else:
                fill[name] = coerce_int(nested[name])
        return record.evolve(**fill) if fill else record


def new(client, settings=None):
    require_client(client, NAME)
    return CloudflareProvider(client, settings)


def register(registry, client, settings=None):
    provider = new(client, settings)
    registry.register(provider)
    return provider
