#
#
#

"""Bulk replace strategies for providers without a native replace call.

Both strategies are sequential and non-atomic: a failure part way through
leaves the zone between the old and the new state, nothing is rolled
back. The context is checked before every call so cancellation stops
further requests.
"""

import logging
from typing import Protocol, Sequence

from .context import Context
from .exceptions import ConfigurationError, NotFoundError
from .models import Record

ORDER_DELETE_FIRST = 'delete_first'
ORDER_CREATE_FIRST = 'create_first'


class BulkReplaceStrategy(Protocol):
    """Protocol for synthesizing a bulk replace from single record calls."""

    def apply(
        self, provider, zone_id: str, records: Sequence[Record], ctx: Context
    ) -> None:
        """Replace the zone's records with ``records``.

        Args:
            provider: Provider exposing list/create/delete record operations
            zone_id: Zone identifier
            records: Desired record set
            ctx: Execution context
        """
        ...


class _SequentialStrategy:
    def __init__(self):
        self.log = logging.getLogger(self.__class__.__name__)

    def _delete_existing(self, provider, zone_id, existing, ctx):
        deleted = 0
        for record in existing:
            if not record.id:
                self.log.warning(
                    'apply: cannot delete %s %s without a record id, skipping',
                    record.record_type,
                    record.hostname,
                )
                continue
            ctx.check()
            try:
                provider.delete_record(zone_id, record.id, ctx=ctx)
            except NotFoundError:
                self.log.debug('apply: record %s already gone', record.id)
                continue
            deleted += 1
        return deleted

    def _create_all(self, provider, zone_id, records, ctx):
        for record in records:
            ctx.check()
            provider.create_record(zone_id, record, ctx=ctx)
        return len(records)


class DeleteFirstStrategy(_SequentialStrategy):
    """Delete every existing record by id, then create the desired set.

    A failure during the create phase leaves the zone with fewer records
    than both the old and the new state.
    """

    order = ORDER_DELETE_FIRST

    def apply(self, provider, zone_id, records, ctx):
        existing = provider.list_records(zone_id, ctx=ctx)
        deleted = self._delete_existing(provider, zone_id, existing, ctx)
        created = self._create_all(provider, zone_id, records, ctx)
        self.log.info(
            'apply: zone_id=%s, deleted=%d, created=%d',
            zone_id,
            deleted,
            created,
        )


class CreateFirstStrategy(_SequentialStrategy):
    """Create the desired set, then delete the previously existing records.

    A failure during the create phase leaves the old records in place; the
    zone temporarily holds both sets.
    """

    order = ORDER_CREATE_FIRST

    def apply(self, provider, zone_id, records, ctx):
        existing = provider.list_records(zone_id, ctx=ctx)
        created = self._create_all(provider, zone_id, records, ctx)
        deleted = self._delete_existing(provider, zone_id, existing, ctx)
        self.log.info(
            'apply: zone_id=%s, created=%d, deleted=%d',
            zone_id,
            created,
            deleted,
        )


def strategy_for(order: str = ORDER_DELETE_FIRST) -> BulkReplaceStrategy:
    if order == ORDER_DELETE_FIRST:
        return DeleteFirstStrategy()
    elif order == ORDER_CREATE_FIRST:
        return CreateFirstStrategy()
    raise ConfigurationError(
        f"Invalid bulk_replace_order '{order}'. Must be "
        f"'{ORDER_DELETE_FIRST}' or '{ORDER_CREATE_FIRST}'"
    )
