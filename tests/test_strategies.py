#
# Sequential bulk replace strategies
#

from unittest import TestCase
from unittest.mock import Mock

from zonekit.context import Context
from zonekit.exceptions import (
    APIError,
    CancelledError,
    ConfigurationError,
    NotFoundError,
)
from zonekit.models import Record
from zonekit.strategies import (
    CreateFirstStrategy,
    DeleteFirstStrategy,
    strategy_for,
)

EXISTING = [
    Record(id='old1', hostname='a', record_type='A', address='1.1.1.1'),
    Record(id='old2', hostname='b', record_type='A', address='2.2.2.2'),
]
DESIRED = [Record(hostname='c', record_type='A', address='3.3.3.3')]


def _provider(existing=EXISTING):
    provider = Mock()
    provider.list_records.return_value = list(existing)
    return provider


def _calls(provider):
    return [c[0] for c in provider.method_calls]


class TestStrategies(TestCase):
    def test_strategy_for(self):
        self.assertIsInstance(strategy_for(), DeleteFirstStrategy)
        self.assertIsInstance(
            strategy_for('delete_first'), DeleteFirstStrategy
        )
        self.assertIsInstance(
            strategy_for('create_first'), CreateFirstStrategy
        )
        with self.assertRaises(ConfigurationError) as ctx:
            strategy_for('sideways')
        self.assertIn('sideways', str(ctx.exception))

    def test_delete_first_order(self):
        provider = _provider()
        DeleteFirstStrategy().apply(provider, 'z1', DESIRED, Context())
        self.assertEqual(
            ['list_records', 'delete_record', 'delete_record', 'create_record'],
            _calls(provider),
        )
        self.assertEqual(
            ['old1', 'old2'],
            [c[0][1] for c in provider.delete_record.call_args_list],
        )
        provider.create_record.assert_called_once()
        self.assertEqual(DESIRED[0], provider.create_record.call_args[0][1])

    def test_create_first_order(self):
        provider = _provider()
        CreateFirstStrategy().apply(provider, 'z1', DESIRED, Context())
        self.assertEqual(
            ['list_records', 'create_record', 'delete_record', 'delete_record'],
            _calls(provider),
        )

    def test_records_without_ids_are_skipped(self):
        provider = _provider([Record(hostname='a', record_type='A')])
        with self.assertLogs('DeleteFirstStrategy', level='WARNING'):
            DeleteFirstStrategy().apply(provider, 'z1', [], Context())
        provider.delete_record.assert_not_called()

    def test_already_deleted_is_ignored(self):
        provider = _provider()
        provider.delete_record.side_effect = [
            NotFoundError('record', 'old1'),
            None,
        ]
        DeleteFirstStrategy().apply(provider, 'z1', DESIRED, Context())
        self.assertEqual(2, provider.delete_record.call_count)
        provider.create_record.assert_called_once()

    def test_other_delete_errors_propagate(self):
        provider = _provider()
        provider.delete_record.side_effect = APIError(
            'DELETE', 'boom', status_code=500
        )
        with self.assertRaises(APIError):
            DeleteFirstStrategy().apply(provider, 'z1', DESIRED, Context())
        provider.create_record.assert_not_called()

    def test_create_failure_leaves_old_records_with_create_first(self):
        provider = _provider()
        provider.create_record.side_effect = APIError('POST', 'rejected')
        with self.assertRaises(APIError):
            CreateFirstStrategy().apply(provider, 'z1', DESIRED, Context())
        provider.delete_record.assert_not_called()

    def test_cancellation_stops_further_calls(self):
        provider = _provider()
        ctx = Context()

        def delete(zone_id, record_id, ctx=None):
            ctx.cancel()

        provider.delete_record.side_effect = delete
        with self.assertRaises(CancelledError):
            DeleteFirstStrategy().apply(provider, 'z1', DESIRED, ctx)
        self.assertEqual(1, provider.delete_record.call_count)
        provider.create_record.assert_not_called()

    def test_empty_desired_set(self):
        provider = _provider()
        DeleteFirstStrategy().apply(provider, 'z1', [], Context())
        self.assertEqual(2, provider.delete_record.call_count)
        provider.create_record.assert_not_called()
