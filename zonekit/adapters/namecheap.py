#
#
#

"""Namecheap XML API.

Namecheap has no per-record endpoints: the host list of a domain is read
with ``namecheap.domains.dns.getHosts`` and written back as a whole with
``namecheap.domains.dns.setHosts``. Single record changes are therefore
read-modify-write cycles keyed by ``(hostname, record_type)`` while a bulk
replace is one atomic call.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional, Protocol, Sequence

from requests import RequestException, Session

from ..context import Context, ensure
from ..exceptions import (
    APIError,
    ConfigurationError,
    InvalidInputError,
    NotFoundError,
    UnauthorizedError,
    UnsupportedOperationError,
)
from ..http_client import DEFAULT_RETRIES, DEFAULT_TIMEOUT, build_session
from ..mapper import coerce_int, coerce_str
from ..models import (
    RECORD_TYPE_A,
    RECORD_TYPE_AAAA,
    RECORD_TYPE_CAA,
    RECORD_TYPE_CNAME,
    RECORD_TYPE_MX,
    RECORD_TYPE_NS,
    RECORD_TYPE_TXT,
    Capabilities,
    Record,
    Zone,
)
from ..provider import Provider
from . import require_client

NAME = 'namecheap'
API_URL = 'https://api.namecheap.com/xml.response'
SANDBOX_API_URL = 'https://api.sandbox.namecheap.com/xml.response'

NS = {'nc': 'http://api.namecheap.com/xml.response'}

PAGE_SIZE = 100
# Domain not found / not associated with the account
NOT_FOUND_ERRORS = ('2019166', '2016166')
# API key invalid / client IP not whitelisted
AUTH_ERRORS = ('1011102', '1011150')

SUPPORTED_RECORD_TYPES = (
    RECORD_TYPE_A,
    RECORD_TYPE_AAAA,
    RECORD_TYPE_CNAME,
    RECORD_TYPE_MX,
    RECORD_TYPE_TXT,
    RECORD_TYPE_NS,
    RECORD_TYPE_CAA,
)


def split_domain(domain: str):
    domain = domain.rstrip('.')
    if '.' not in domain:
        raise InvalidInputError(
            'domain', f'{domain} is not a registrable domain'
        )
    sld, tld = domain.split('.', 1)
    return sld, tld


class NamecheapClient(Protocol):
    '''
    Namecheap API calls used by the provider. Hosts and domains are the
    attribute dicts of the corresponding XML elements (``Name``, ``Type``,
    ``Address``, ``MXPref``, ``TTL``, ...).
    '''

    def get_domains(
        self, ctx: Optional[Context] = None
    ) -> List[Dict[str, str]]:
        ...

    def get_domain_info(
        self, domain: str, ctx: Optional[Context] = None
    ) -> Dict[str, str]:
        ...

    def get_hosts(
        self, domain: str, ctx: Optional[Context] = None
    ) -> List[Dict[str, str]]:
        ...

    def set_hosts(
        self,
        domain: str,
        hosts: Sequence[Dict[str, Any]],
        email_type: Optional[str] = None,
        ctx: Optional[Context] = None,
    ) -> None:
        ...


class XMLAPIClient(object):
    def __init__(
        self,
        api_user: str,
        api_key: str,
        client_ip: str,
        username: Optional[str] = None,
        sandbox: bool = False,
        timeout: Optional[float] = None,
        retries: Optional[int] = None,
        session: Optional[Session] = None,
    ):
        self.log = logging.getLogger(f'XMLAPIClient[{api_user}]')
        self.log.debug(
            '__init__: api_user=%s, api_key=***, sandbox=%s', api_user, sandbox
        )
        self.url = SANDBOX_API_URL if sandbox else API_URL
        self.timeout = timeout or DEFAULT_TIMEOUT
        self._auth = {
            'ApiUser': api_user,
            'ApiKey': api_key,
            'UserName': username or api_user,
            'ClientIp': client_ip,
        }
        self._session = build_session(
            session, retries=retries or DEFAULT_RETRIES
        )

    def _call(self, command, params=None, ctx=None, post=False):
        ctx = ensure(ctx)
        ctx.check()
        self.log.debug('_call: command=%s', command)
        payload = dict(self._auth)
        payload['Command'] = command
        payload.update(params or {})
        try:
            if post:
                response = self._session.post(
                    self.url, data=payload, timeout=ctx.timeout(self.timeout)
                )
            else:
                response = self._session.get(
                    self.url,
                    params=payload,
                    timeout=ctx.timeout(self.timeout),
                )
        except RequestException as e:
            raise APIError(command, f'request failed: {e}') from e
        if not response.ok:
            raise APIError(
                command,
                f'request failed with status {response.status_code}',
                status_code=response.status_code,
            )
        return self._parse(command, response.text)

    def _parse(self, command, text):
        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            raise APIError(command, f'invalid XML response: {e}') from e
        if root.get('Status', '').upper() != 'ERROR':
            return root
        error = root.find('.//nc:Errors/nc:Error', NS)
        number = error.get('Number', '') if error is not None else ''
        message = (error.text or '').strip() if error is not None else ''
        if number in NOT_FOUND_ERRORS:
            raise NotFoundError('domain', message)
        if number in AUTH_ERRORS:
            raise UnauthorizedError(command)
        raise APIError(command, f'{message} ({number})')

    def get_domains(self, ctx=None):
        domains = []
        page = 1
        while True:
            root = self._call(
                'namecheap.domains.getList',
                {'PageSize': PAGE_SIZE, 'Page': page},
                ctx=ctx,
            )
            batch = [
                dict(el.attrib) for el in root.findall('.//nc:Domain', NS)
            ]
            domains.extend(batch)
            total = coerce_int(
                root.findtext('.//nc:Paging/nc:TotalItems', '', NS)
            )
            if len(batch) < PAGE_SIZE or len(domains) >= total:
                return domains
            page += 1

    def get_domain_info(self, domain, ctx=None):
        root = self._call(
            'namecheap.domains.getInfo', {'DomainName': domain}, ctx=ctx
        )
        result = root.find('.//nc:DomainGetInfoResult', NS)
        if result is None:
            raise NotFoundError('domain', domain)
        return dict(result.attrib)

    def get_hosts(self, domain, ctx=None):
        sld, tld = split_domain(domain)
        root = self._call(
            'namecheap.domains.dns.getHosts', {'SLD': sld, 'TLD': tld}, ctx=ctx
        )
        return [dict(el.attrib) for el in root.findall('.//nc:host', NS)]

    def set_hosts(self, domain, hosts, email_type=None, ctx=None):
        sld, tld = split_domain(domain)
        params = {'SLD': sld, 'TLD': tld}
        if email_type:
            params['EmailType'] = email_type
        for i, host in enumerate(hosts, start=1):
            for key, value in host.items():
                params[f'{key}{i}'] = value
        root = self._call(
            'namecheap.domains.dns.setHosts', params, ctx=ctx, post=True
        )
        result = root.find('.//nc:DomainDNSSetHostsResult', NS)
        if result is not None and result.get('IsSuccess', '').lower() != 'true':
            raise APIError(
                'namecheap.domains.dns.setHosts',
                f'host update for {domain} was not applied',
            )


class NamecheapProvider(Provider):
    def __init__(self, client: NamecheapClient):
        self.log = logging.getLogger(f'NamecheapProvider[{NAME}]')
        self._client = client
        self._capabilities = Capabilities(
            supports_record_id=False,
            supports_bulk_replace=True,
            supports_zone_discovery=True,
            is_bulk_replace_atomic=True,
            supported_record_types=SUPPORTED_RECORD_TYPES,
        )

    @property
    def name(self):
        return NAME

    def capabilities(self):
        return self._capabilities

    def _record_from_host(self, host: Dict[str, str]) -> Record:
        return Record(
            hostname=coerce_str(host.get('Name')),
            record_type=coerce_str(host.get('Type')),
            address=coerce_str(host.get('Address')),
            ttl=coerce_int(host.get('TTL')),
            mx_pref=coerce_int(host.get('MXPref')),
            metadata=dict(host),
            raw=dict(host),
        )

    def _host_from_record(self, record: Record) -> Dict[str, Any]:
        host = {
            'HostName': record.hostname,
            'RecordType': record.record_type,
            'Address': record.address,
        }
        if record.ttl > 0:
            host['TTL'] = record.ttl
        if record.mx_pref > 0:
            host['MXPref'] = record.mx_pref
        return host

    def _set_records(self, zone_id, records, ctx):
        hosts = [self._host_from_record(r) for r in records]
        email_type = None
        if any(r.record_type == RECORD_TYPE_MX for r in records):
            # required by the API whenever MX hosts are present
            email_type = 'MX'
        self.log.debug(
            '_set_records: zone_id=%s, len(records)=%d', zone_id, len(hosts)
        )
        self._client.set_hosts(zone_id, hosts, email_type=email_type, ctx=ctx)

    def _index_of(self, records, record):
        matches = [i for i, r in enumerate(records) if r.key == record.key]
        if not matches:
            raise NotFoundError(
                'DNS record', f'{record.hostname} {record.record_type}'
            )
        if len(matches) > 1:
            raise InvalidInputError(
                'record',
                f'{len(matches)} records match {record.hostname} '
                f'{record.record_type}, refusing to pick one',
            )
        return matches[0]

    def list_zones(self, ctx=None):
        zones = []
        for domain in self._client.get_domains(ctx=ctx):
            name = domain.get('Name')
            if name:
                zones.append(Zone(id=name, name=name, metadata=dict(domain)))
        self.log.debug('list_zones: found %d zones', len(zones))
        return zones

    def get_zone(self, name, ctx=None):
        info = self._client.get_domain_info(name.rstrip('.'), ctx=ctx)
        domain = info.get('DomainName') or name.rstrip('.')
        return Zone(id=domain, name=domain, metadata=info)

    def list_records(self, zone_id, ctx=None):
        records = [
            self._record_from_host(h)
            for h in self._client.get_hosts(zone_id, ctx=ctx)
        ]
        self.log.debug(
            'list_records: zone_id=%s, found %d records', zone_id, len(records)
        )
        return records

    def create_record(self, zone_id, record, ctx=None):
        records = self.list_records(zone_id, ctx=ctx)
        records.append(record)
        self._set_records(zone_id, records, ctx)
        return record

    def update_record(self, zone_id, record_id, record, ctx=None):
        raise UnsupportedOperationError('update by ID', NAME)

    def delete_record(self, zone_id, record_id, ctx=None):
        raise UnsupportedOperationError('delete by ID', NAME)

    def update_host(self, zone_id, record, ctx=None):
        '''
        Replace the record sharing ``record``'s hostname and type.

        :raises NotFoundError: when no record matches
        :raises InvalidInputError: when several records match
        '''
        records = self.list_records(zone_id, ctx=ctx)
        records[self._index_of(records, record)] = record
        self._set_records(zone_id, records, ctx)
        return record

    def delete_host(self, zone_id, record, ctx=None):
        records = self.list_records(zone_id, ctx=ctx)
        del records[self._index_of(records, record)]
        self._set_records(zone_id, records, ctx)

    def bulk_replace_records(self, zone_id, records, ctx=None):
        self._set_records(zone_id, list(records), ctx)

    def validate(self):
        if self._client is None:
            raise ConfigurationError('namecheap client is not initialized')


def new(client: NamecheapClient) -> NamecheapProvider:
    require_client(client, NAME)
    return NamecheapProvider(client)


def register(registry, client: NamecheapClient) -> NamecheapProvider:
    provider = new(client)
    registry.register(provider)
    return provider
