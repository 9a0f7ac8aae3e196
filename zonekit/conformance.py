#
#
#

"""Behavioural checks every provider is expected to pass.

Mix ``ProviderConformanceMixin`` into a ``unittest.TestCase`` and
implement ``make_provider``::

    class TestMyProviderConformance(ProviderConformanceMixin, TestCase):
        def make_provider(self):
            return MyProvider(client=fake_api())

Providers without zone discovery set ``zone_id`` on the test case. The
checks adapt to ``capabilities()``: update/delete by id only run for
providers with record ids, id-less providers are exercised through
``bulk_replace_records`` instead.
"""

import threading
import uuid
from typing import Dict, Iterable, List, Optional

from .exceptions import NotFoundError, UnsupportedOperationError
from .models import (
    DEFAULT_RECORD_TYPES,
    RECORD_TYPE_SRV,
    RECORD_TYPE_TXT,
    Capabilities,
    Record,
    Zone,
)
from .provider import Provider

UNKNOWN_ZONE = 'zonekit-conformance.invalid'


class ProviderConformanceMixin(object):
    zone_id: Optional[str] = None

    def make_provider(self) -> Provider:
        raise NotImplementedError('Abstract base class, make_provider missing')

    def setUp(self):
        super().setUp()
        self.provider = self.make_provider()
        self.caps = self.provider.capabilities()

    def _zone_under_test(self) -> str:
        if self.zone_id:
            return self.zone_id
        if not self.caps.supports_zone_discovery:
            self.skipTest('provider has no zone discovery and no zone_id set')
        zones = self.provider.list_zones()
        if not zones:
            self.skipTest('no zones available')
        return zones[0].id

    def _find(self, records, wanted):
        for record in records:
            if self.caps.supports_record_id:
                if record.id == wanted.id:
                    return record
            elif (
                record.hostname == wanted.hostname
                and record.record_type == wanted.record_type
                and record.address == wanted.address
            ):
                return record
        return None

    def test_conformance_capabilities(self):
        self.assertTrue(self.caps.supported_record_types)
        self.assertFalse(
            self.caps.is_bulk_replace_atomic
            and not self.caps.supports_bulk_replace
        )
        # structural check, must not raise
        self.provider.validate()

    def test_conformance_zones(self):
        if not self.caps.supports_zone_discovery:
            self.skipTest('provider does not support zone discovery')
        zones = self.provider.list_zones()
        if not zones:
            self.skipTest('no zones available')
        zone = zones[0]
        fetched = self.provider.get_zone(zone.name)
        self.assertEqual(zone.id, fetched.id)
        self.assertEqual(zone.name, fetched.name)

        with self.assertRaises(NotFoundError):
            self.provider.get_zone(UNKNOWN_ZONE)

    def test_conformance_record_crud(self):
        zone_id = self._zone_under_test()
        record = Record(
            hostname='conformance-test',
            record_type=RECORD_TYPE_TXT,
            address='test-value',
            ttl=300,
        )
        bystander = self.provider.create_record(
            zone_id, record.evolve(address='bystander-value')
        )
        created = self.provider.create_record(zone_id, record)
        if self.caps.supports_record_id:
            self.assertTrue(created.id)
            self.assertNotEqual(bystander.id, created.id)
        self.assertEqual(record.hostname, created.hostname)
        self.assertEqual(record.record_type, created.record_type)
        self.assertEqual(record.address, created.address)

        records = self.provider.list_records(zone_id)
        self.assertIsNotNone(self._find(records, created))
        # same hostname and type, both values are kept
        self.assertIsNotNone(self._find(records, bystander))

        if not self.caps.supports_record_id:
            return

        updated = self.provider.update_record(
            zone_id, created.id, created.evolve(address='updated-value')
        )
        self.assertEqual('updated-value', updated.address)
        self.assertEqual(created.id, updated.id)
        self.assertEqual(created.hostname, updated.hostname)

        self.provider.delete_record(zone_id, created.id)
        records = self.provider.list_records(zone_id)
        self.assertIsNone(self._find(records, created))
        # only the addressed record is removed
        self.assertIsNotNone(self._find(records, bystander))

    def test_conformance_srv(self):
        if not self.caps.supports_type(RECORD_TYPE_SRV):
            self.skipTest('provider does not support SRV')
        zone_id = self._zone_under_test()
        srv = Record(
            hostname='_sip._tcp',
            record_type=RECORD_TYPE_SRV,
            priority=10,
            weight=5,
            port=5060,
            target='sip.example.com',
            ttl=300,
        )
        created = self.provider.create_record(zone_id, srv)
        self.assertEqual(srv.hostname, created.hostname)
        self.assertEqual(srv.record_type, created.record_type)
        self.assertEqual(srv.priority, created.priority)
        self.assertEqual(srv.weight, created.weight)
        self.assertEqual(srv.port, created.port)
        self.assertEqual(srv.target, created.target)

    def test_conformance_bulk_replace_empty(self):
        if not self.caps.supports_bulk_replace:
            self.skipTest('provider does not support bulk replace')
        zone_id = self._zone_under_test()
        self.provider.create_record(
            zone_id,
            Record(
                hostname='bulk',
                record_type=RECORD_TYPE_TXT,
                address='before',
                ttl=300,
            ),
        )
        self.provider.bulk_replace_records(zone_id, [])
        self.assertEqual([], self.provider.list_records(zone_id))


class InMemoryProvider(Provider):
    '''
    Thread safe reference provider keeping zones and records in memory.

    With ``supports_record_id=False`` it behaves like an id-less provider:
    records carry no id, creates append to the zone and update/delete by
    id are refused. Several records may share a hostname and type.
    '''

    def __init__(
        self,
        name: str = 'memory',
        zones: Iterable[Zone] = (),
        supports_record_id: bool = True,
        record_types: Iterable[str] = DEFAULT_RECORD_TYPES,
    ):
        self._name = name
        self._lock = threading.RLock()
        self._zones: Dict[str, Zone] = {}
        self._records: Dict[str, List[Record]] = {}
        self._capabilities = Capabilities(
            supports_record_id=supports_record_id,
            supports_bulk_replace=True,
            supports_zone_discovery=True,
            is_bulk_replace_atomic=True,
            supported_record_types=tuple(record_types),
        )
        for zone in zones:
            self.add_zone(zone)

    def add_zone(self, zone: Zone) -> None:
        with self._lock:
            self._zones[zone.name.rstrip('.').lower()] = zone
            self._records.setdefault(zone.id, [])

    @property
    def name(self):
        return self._name

    def capabilities(self):
        return self._capabilities

    def _store(self, zone_id):
        try:
            return self._records[zone_id]
        except KeyError:
            raise NotFoundError('zone', zone_id) from None

    def _stored(self, record):
        if self._capabilities.supports_record_id:
            return record.evolve(id=uuid.uuid4().hex)
        return record.evolve(id='')

    def _index(self, store, record_id):
        for i, record in enumerate(store):
            if record.id == record_id:
                return i
        raise NotFoundError('record', record_id)

    def list_zones(self, ctx=None) -> List[Zone]:
        with self._lock:
            return sorted(self._zones.values(), key=lambda z: z.name)

    def get_zone(self, name, ctx=None):
        with self._lock:
            try:
                return self._zones[name.rstrip('.').lower()]
            except KeyError:
                raise NotFoundError('zone', name) from None

    def list_records(self, zone_id, ctx=None):
        with self._lock:
            return list(self._store(zone_id))

    def create_record(self, zone_id, record, ctx=None):
        with self._lock:
            record = self._stored(record)
            self._store(zone_id).append(record)
            return record

    def update_record(self, zone_id, record_id, record, ctx=None):
        if not self._capabilities.supports_record_id:
            raise UnsupportedOperationError('update by ID', self._name)
        with self._lock:
            store = self._store(zone_id)
            record = record.evolve(id=record_id)
            store[self._index(store, record_id)] = record
            return record

    def delete_record(self, zone_id, record_id, ctx=None):
        if not self._capabilities.supports_record_id:
            raise UnsupportedOperationError('delete by ID', self._name)
        with self._lock:
            store = self._store(zone_id)
            del store[self._index(store, record_id)]

    def bulk_replace_records(self, zone_id, records, ctx=None):
        with self._lock:
            store = self._store(zone_id)
            store[:] = [self._stored(r) for r in records]

    def validate(self):
        pass
