#
#
#

from ..clients import Transport
from ..mapper import FieldMapping, Mappings
from ..rest import RestProvider
from . import require_client, srv_address_to_target, srv_target_to_address

NAME = 'digitalocean'
BASE_URL = 'https://api.digitalocean.com/v2'

FIELDS = FieldMapping(
    id='id',
    hostname='name',
    record_type='type',
    address='data',
    ttl='ttl',
    mx_pref='priority',
    priority='priority',
    weight='weight',
    port='port',
)

MAPPINGS = Mappings(
    request=FIELDS,
    response=FIELDS,
    list_path='domain_records',
    response_path='domain_record',
    zone_list_path='domains',
    # domains are addressed by name
    zone_id='name',
    zone_name='name',
)

ENDPOINTS = {
    'list_zones': '/domains',
    'get_zone': '/domains/{domain}',
    'get_records': '/domains/{zone_id}/records',
    'create_record': '/domains/{zone_id}/records',
    'update_record': '/domains/{zone_id}/records/{id}',
    'delete_record': '/domains/{zone_id}/records/{id}',
}


class DigitalOceanProvider(RestProvider):
    '''
    DigitalOcean domains API. SRV targets travel in ``data``.
    '''

    def __init__(self, client: Transport, settings=None):
        super().__init__(NAME, client, MAPPINGS, ENDPOINTS, settings)

    def _request_body(self, record):
        return super()._request_body(srv_target_to_address(record))

    def _parse_record(self, data):
        return srv_address_to_target(super()._parse_record(data))


def new(client, settings=None):
    require_client(client, NAME)
    return DigitalOceanProvider(client, settings)


def register(registry, client, settings=None):
    provider = new(client, settings)
    registry.register(provider)
    return provider
