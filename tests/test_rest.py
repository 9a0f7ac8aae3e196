#
# Generic REST provider against a mocked transport
#

from unittest import TestCase
from unittest.mock import Mock

from zonekit.exceptions import (
    APIError,
    ConfigurationError,
    InvalidInputError,
    NotFoundError,
    UnauthorizedError,
    UnsupportedOperationError,
)
from zonekit.http_client import HTTPClient
from zonekit.mapper import FieldMapping, Mappings, default_mappings
from zonekit.models import Capabilities, Record
from zonekit.rest import RestProvider, render_endpoint

ENDPOINTS = {
    'list_zones': '/zones',
    'get_records': '/domains/{zone_id}/records',
    'create_record': '/domains/{zone_id}/records',
    'update_record': '/domains/{zone_id}/records/{id}',
    'delete_record': '/domains/{zone_id}/records/{id}',
}

NO_IDS = FieldMapping(
    hostname='hostname', record_type='record_type', address='address'
)


def _provider(endpoints=None, mappings=None, settings=None, **kwargs):
    client = Mock()
    provider = RestProvider(
        'test',
        client,
        mappings or default_mappings(),
        ENDPOINTS if endpoints is None else endpoints,
        settings,
        **kwargs,
    )
    return provider, client


class TestRenderEndpoint(TestCase):
    def test_zone_and_record(self):
        self.assertEqual(
            '/domains/z1/records/r1',
            render_endpoint(
                '/domains/{zone_id}/records/{id}', zone_id='z1', record_id='r1'
            ),
        )

    def test_aliases(self):
        for token in ('record_id', 'recordId', 'dns_record_id', 'id'):
            self.assertEqual(
                '/zones/z/records/r',
                render_endpoint(
                    f'/zones/{{zone_id}}/records/{{{token}}}',
                    zone_id='z',
                    record_id='r',
                ),
            )

    def test_domain_defaults_to_zone(self):
        self.assertEqual(
            '/domains/example.com/records',
            render_endpoint('/domains/{domain}/records', zone_id='example.com'),
        )

    def test_unknown_tokens_bind_to_zone(self):
        self.assertEqual(
            '/zones/z/dns_records/r',
            render_endpoint(
                '/zones/{zone_identifier}/dns_records/{identifier_of_record}',
                zone_id='z',
                record_id='r',
            ),
        )

    def test_missing_record_id(self):
        with self.assertRaises(InvalidInputError):
            render_endpoint('/domains/{zone_id}/records/{id}', zone_id='z')


class TestCapabilities(TestCase):
    def test_inferred_with_ids(self):
        caps = _provider()[0].capabilities()
        self.assertTrue(caps.supports_record_id)
        self.assertTrue(caps.supports_bulk_replace)
        self.assertFalse(caps.is_bulk_replace_atomic)
        self.assertTrue(caps.supports_zone_discovery)
        self.assertIn('SRV', caps.supported_record_types)

    def test_inferred_without_ids(self):
        endpoints = dict(ENDPOINTS)
        del endpoints['list_zones']
        caps = _provider(
            endpoints,
            Mappings(request=NO_IDS, response=NO_IDS),
            settings={'record_types': ['A', 'TXT']},
        )[0].capabilities()
        self.assertFalse(caps.supports_record_id)
        self.assertFalse(caps.supports_bulk_replace)
        self.assertFalse(caps.supports_zone_discovery)
        self.assertEqual(('A', 'TXT'), caps.supported_record_types)

    def test_native_bulk_is_atomic(self):
        endpoints = dict(ENDPOINTS, bulk_replace_records='/domains/{zone_id}')
        caps = _provider(
            endpoints, Mappings(request=NO_IDS, response=NO_IDS)
        )[0].capabilities()
        self.assertTrue(caps.supports_bulk_replace)
        self.assertTrue(caps.is_bulk_replace_atomic)

    def test_explicit_override(self):
        caps = Capabilities(supported_record_types=('A',))
        self.assertIs(caps, _provider(capabilities=caps)[0].capabilities())


class TestZones(TestCase):
    def test_list_zones(self):
        provider, client = _provider()
        client.get.return_value = {
            'zones': [{'id': 'z1', 'name': 'example.com'}, {'id': 'z2'}]
        }
        zones = provider.list_zones()
        self.assertEqual(1, len(zones))
        self.assertEqual('z1', zones[0].id)
        self.assertEqual('example.com', zones[0].name)
        client.get.assert_called_once_with('/zones', ctx=None)

    def test_list_zones_unsupported(self):
        provider, _ = _provider({'get_records': '/r'})
        with self.assertRaises(UnsupportedOperationError):
            provider.list_zones()

    def test_get_zone_matches_case_and_trailing_dot(self):
        provider, client = _provider()
        client.get.return_value = {
            'zones': [{'id': 'z1', 'name': 'Example.COM.'}]
        }
        self.assertEqual('z1', provider.get_zone('example.com').id)
        with self.assertRaises(NotFoundError):
            provider.get_zone('other.com')

    def test_get_zone_endpoint_unwraps_envelope(self):
        provider, client = _provider(
            dict(ENDPOINTS, get_zone='/zones/{domain}')
        )
        client.get.return_value = {
            'result': {'id': 'z9', 'name': 'example.com'}
        }
        zone = provider.get_zone('example.com')
        self.assertEqual('z9', zone.id)
        client.get.assert_called_once_with('/zones/example.com', ctx=None)

    def test_get_zone_falls_back_to_listing(self):
        provider, client = _provider(
            dict(ENDPOINTS, get_zone='/zones/{domain}')
        )
        client.get.side_effect = [
            NotFoundError('resource', '/zones/example.com'),
            {'zones': [{'id': 'z1', 'name': 'example.com'}]},
        ]
        self.assertEqual('z1', provider.get_zone('example.com').id)

    def test_resolve_zone_id_setting_wins(self):
        provider, client = _provider(settings={'zone_id': 'z-123'})
        self.assertEqual('z-123', provider.resolve_zone_id('example.com'))
        client.get.assert_not_called()

    def test_resolve_zone_id_from_listing(self):
        provider, client = _provider()
        client.get.return_value = {
            'zones': [{'id': 'z1', 'name': 'example.com'}]
        }
        self.assertEqual('z1', provider.resolve_zone_id('example.com.'))

    def test_resolve_zone_id_degrades_to_domain(self):
        provider, client = _provider()
        client.get.side_effect = APIError('GET', 'boom', status_code=500)
        self.assertEqual('example.com', provider.resolve_zone_id('example.com'))

        provider, _ = _provider({'get_records': '/r'})
        self.assertEqual('example.com', provider.resolve_zone_id('example.com'))


class TestRecords(TestCase):
    def test_list_records(self):
        provider, client = _provider()
        client.get.return_value = {
            'records': [
                {
                    'id': 'r1',
                    'hostname': 'www',
                    'record_type': 'A',
                    'address': '1.2.3.4',
                    'ttl': 300,
                }
            ]
        }
        records = provider.list_records('z1')
        self.assertEqual(1, len(records))
        self.assertEqual('r1', records[0].id)
        self.assertEqual(300, records[0].ttl)
        client.get.assert_called_once_with('/domains/z1/records', ctx=None)

    def test_list_records_missing_array(self):
        provider, client = _provider()
        client.get.return_value = {'records': None}
        self.assertEqual([], provider.list_records('z1'))

    def test_create_unwraps_result(self):
        provider, client = _provider()
        client.post.return_value = {
            'success': True,
            'result': {
                'id': 'new',
                'hostname': 'www',
                'record_type': 'A',
                'address': '1.2.3.4',
            },
        }
        record = Record(hostname='www', record_type='A', address='1.2.3.4')
        created = provider.create_record('z1', record)
        self.assertEqual('1.2.3.4', created.address)
        self.assertEqual('new', created.id)
        client.post.assert_called_once_with(
            '/domains/z1/records',
            {'hostname': 'www', 'record_type': 'A', 'address': '1.2.3.4'},
            ctx=None,
        )

    def test_create_unwraps_data_and_response_path(self):
        mappings = default_mappings()
        provider, client = _provider(
            mappings=Mappings(
                request=mappings.request,
                response=mappings.response,
                list_path='records',
                response_path='payload.record',
            )
        )
        client.post.return_value = {
            'payload': {'record': {'id': 'p1', 'address': '9.9.9.9'}}
        }
        record = Record(hostname='www', record_type='A', address='1.1.1.1')
        created = provider.create_record('z1', record)
        self.assertEqual('p1', created.id)
        self.assertEqual('9.9.9.9', created.address)
        # fields absent from the response come from the sent record
        self.assertEqual('www', created.hostname)

        client.post.return_value = {'data': {'id': 'd1', 'hostname': 'www'}}
        self.assertEqual('d1', provider.create_record('z1', record).id)

    def test_create_degrades_to_input(self):
        provider, client = _provider()
        record = Record(hostname='www', record_type='A', address='1.2.3.4')
        for response in (None, [], {'status': 'ok'}, 'created'):
            client.post.return_value = response
            self.assertEqual(record, provider.create_record('z1', record))

    def test_update(self):
        provider, client = _provider()
        client.put.return_value = None
        record = Record(hostname='www', record_type='A', address='5.6.7.8')
        updated = provider.update_record('z1', 'r1', record)
        self.assertEqual('r1', updated.id)
        self.assertEqual('5.6.7.8', updated.address)
        client.put.assert_called_once_with(
            '/domains/z1/records/r1',
            {
                'id': 'r1',
                'hostname': 'www',
                'record_type': 'A',
                'address': '5.6.7.8',
            },
            ctx=None,
        )

    def test_update_with_patch(self):
        provider, client = _provider(settings={'update_method': 'patch'})
        client.patch.return_value = None
        provider.update_record('z1', 'r1', Record(hostname='www'))
        client.patch.assert_called_once()
        client.put.assert_not_called()

    def test_update_requires_id(self):
        provider, client = _provider()
        with self.assertRaises(InvalidInputError):
            provider.update_record('z1', '', Record(hostname='www'))
        client.put.assert_not_called()

    def test_update_and_delete_without_id_support(self):
        provider, client = _provider(
            mappings=Mappings(request=NO_IDS, response=NO_IDS)
        )
        with self.assertRaises(UnsupportedOperationError) as ctx:
            provider.update_record('z1', 'r1', Record())
        self.assertEqual(
            'update by ID not supported by test', str(ctx.exception)
        )
        with self.assertRaises(UnsupportedOperationError):
            provider.delete_record('z1', 'r1')
        client.put.assert_not_called()
        client.delete.assert_not_called()

    def test_delete(self):
        provider, client = _provider()
        provider.delete_record('z1', 'r1')
        client.delete.assert_called_once_with(
            '/domains/z1/records/r1', ctx=None
        )

    def test_missing_endpoint(self):
        provider, _ = _provider({'list_zones': '/zones'})
        with self.assertRaises(ConfigurationError):
            provider.list_records('z1')


class TestErrorOperations(TestCase):
    def test_api_errors_name_the_operation(self):
        response = Mock()
        response.status_code = 500
        response.ok = False
        response.text = 'internal error'
        session = Mock()
        session.headers = {}
        session.request.return_value = response
        client = HTTPClient('https://api.example.com', session=session)
        provider = RestProvider(
            'test', client, default_mappings(), ENDPOINTS
        )

        with self.assertRaises(APIError) as ctx:
            provider.list_records('z1')
        self.assertEqual('list_records', ctx.exception.operation)
        self.assertEqual(500, ctx.exception.status_code)
        self.assertIn('internal error', ctx.exception.message)
        self.assertEqual('GET', ctx.exception.__cause__.operation)

    def test_each_record_operation(self):
        provider, client = _provider(
            dict(ENDPOINTS, bulk_replace_records='/domains/{zone_id}/all')
        )
        error = APIError('X', 'rejected', status_code=422)
        client.get.side_effect = error
        client.post.side_effect = error
        client.put.side_effect = error
        client.delete.side_effect = error
        record = Record(hostname='www', record_type='A', address='1.2.3.4')
        for operation, call in (
            ('list_zones', lambda: provider.list_zones()),
            ('create_record', lambda: provider.create_record('z1', record)),
            (
                'update_record',
                lambda: provider.update_record('z1', 'r1', record),
            ),
            ('delete_record', lambda: provider.delete_record('z1', 'r1')),
            (
                'bulk_replace_records',
                lambda: provider.bulk_replace_records('z1', [record]),
            ),
        ):
            with self.assertRaises(APIError) as ctx:
                call()
            self.assertEqual(operation, ctx.exception.operation)
            self.assertEqual(422, ctx.exception.status_code)
            self.assertIs(error, ctx.exception.__cause__)

    def test_unauthorized_keeps_its_type(self):
        provider, client = _provider()
        client.get.side_effect = UnauthorizedError('GET')
        with self.assertRaises(UnauthorizedError) as ctx:
            provider.list_records('z1')
        self.assertEqual('list_records', ctx.exception.operation)
        self.assertEqual(401, ctx.exception.status_code)

    def test_not_found_passes_through(self):
        provider, client = _provider()
        client.delete.side_effect = NotFoundError('resource', '/r1')
        with self.assertRaises(NotFoundError):
            provider.delete_record('z1', 'r1')


class TestBulkReplace(TestCase):
    def test_native_endpoint(self):
        provider, client = _provider(
            dict(ENDPOINTS, bulk_replace_records='/domains/{zone_id}/all')
        )
        provider.bulk_replace_records(
            'z1', [Record(hostname='www', record_type='A', address='1.2.3.4')]
        )
        client.put.assert_called_once()
        path, body = client.put.call_args[0]
        self.assertEqual('/domains/z1/all', path)
        self.assertEqual(
            [{'hostname': 'www', 'record_type': 'A', 'address': '1.2.3.4'}],
            body,
        )
        client.delete.assert_not_called()

    def test_fallback_deletes_then_creates(self):
        provider, client = _provider()
        client.get.return_value = {
            'records': [
                {'id': 'old1', 'hostname': 'a', 'record_type': 'A'},
                {'id': 'old2', 'hostname': 'b', 'record_type': 'A'},
            ]
        }
        client.post.return_value = None
        provider.bulk_replace_records(
            'z1', [Record(hostname='c', record_type='A', address='1.1.1.1')]
        )
        self.assertEqual(
            ['/domains/z1/records/old1', '/domains/z1/records/old2'],
            [c[0][0] for c in client.delete.call_args_list],
        )
        client.post.assert_called_once()
        # the existing set is read before anything is removed
        self.assertEqual(
            ['get', 'delete', 'delete', 'post'],
            [c[0] for c in client.method_calls],
        )

    def test_fallback_unsupported_without_ids(self):
        provider, _ = _provider(
            mappings=Mappings(request=NO_IDS, response=NO_IDS)
        )
        with self.assertRaises(UnsupportedOperationError):
            provider.bulk_replace_records('z1', [])

    def test_invalid_order(self):
        with self.assertRaises(ConfigurationError):
            _provider(settings={'bulk_replace_order': 'sideways'})


class TestValidate(TestCase):
    def test_valid(self):
        _provider()[0].validate()

    def test_no_endpoints(self):
        with self.assertRaises(ConfigurationError):
            _provider({})[0].validate()

    def test_no_client(self):
        provider = RestProvider('test', None, default_mappings(), ENDPOINTS)
        with self.assertRaises(ConfigurationError):
            provider.validate()

    def test_incomplete_mappings(self):
        provider, _ = _provider(
            mappings=Mappings(response=FieldMapping(hostname='name'))
        )
        with self.assertRaises(ConfigurationError):
            provider.validate()
