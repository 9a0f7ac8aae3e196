#
#
#

from ..clients import Transport
from ..mapper import FieldMapping, Mappings
from ..rest import RestProvider
from . import require_client, srv_address_to_target, srv_target_to_address

NAME = 'godaddy'
BASE_URL = 'https://api.godaddy.com/v1'

# No id mapping, GoDaddy does not expose record identifiers
FIELDS = FieldMapping(
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
    list_path='',
    zone_list_path='',
    zone_id='domain',
    zone_name='domain',
)

ENDPOINTS = {
    'list_zones': '/domains',
    'get_zone': '/domains/{domain}',
    'get_records': '/domains/{domain}/records',
    'create_record': '/domains/{domain}/records',
    'bulk_replace_records': '/domains/{domain}/records',
}


class GoDaddyProvider(RestProvider):
    '''
    GoDaddy domains API.

    Records have no ids, so update and delete by id are unsupported. The
    whole record set is replaced atomically with a single PUT.
    '''

    def __init__(self, client: Transport, settings=None):
        super().__init__(NAME, client, MAPPINGS, ENDPOINTS, settings)

    def _request_body(self, record):
        return super()._request_body(srv_target_to_address(record))

    def _parse_record(self, data):
        return srv_address_to_target(super()._parse_record(data))

    def create_record(self, zone_id, record, ctx=None):
        self.log.debug(
            'create_record: zone_id=%s, type=%s, name=%s',
            zone_id,
            record.record_type,
            record.hostname,
        )
        # records are always posted as an array, the response has no body
        self.client.post(
            self.endpoint('create_record', zone_id=zone_id),
            [self._request_body(record)],
            ctx=ctx,
        )
        return record


def new(client, settings=None):
    require_client(client, NAME)
    return GoDaddyProvider(client, settings)


def register(registry, client, settings=None):
    provider = new(client, settings)
    registry.register(provider)
    return provider
