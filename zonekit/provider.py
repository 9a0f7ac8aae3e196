#
#
#

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from .context import Context
from .models import Capabilities, Record, Zone


class Provider(ABC):
    '''
    Uniform zone/record contract implemented by every adapter.

    Operations a provider cannot perform raise
    ``UnsupportedOperationError`` naming the limitation; callers are
    expected to branch on ``capabilities()`` rather than on failures.
    Every operation accepts an optional ``ctx`` used for cancellation.
    '''

    @property
    @abstractmethod
    def name(self) -> str:
        '''Unique provider name, e.g. ``cloudflare``.'''

    @abstractmethod
    def capabilities(self) -> Capabilities:
        '''Snapshot computed once when the provider is built.'''

    @abstractmethod
    def list_zones(self, ctx: Optional[Context] = None) -> List[Zone]:
        pass

    @abstractmethod
    def get_zone(self, name: str, ctx: Optional[Context] = None) -> Zone:
        '''
        :raises NotFoundError: when the provider has no such zone
        '''

    @abstractmethod
    def list_records(
        self, zone_id: str, ctx: Optional[Context] = None
    ) -> List[Record]:
        pass

    @abstractmethod
    def create_record(
        self, zone_id: str, record: Record, ctx: Optional[Context] = None
    ) -> Record:
        '''
        Returns the provider's view of the record, which may carry a newly
        assigned ``id``.
        '''

    @abstractmethod
    def update_record(
        self,
        zone_id: str,
        record_id: str,
        record: Record,
        ctx: Optional[Context] = None,
    ) -> Record:
        pass

    @abstractmethod
    def delete_record(
        self, zone_id: str, record_id: str, ctx: Optional[Context] = None
    ) -> None:
        pass

    @abstractmethod
    def bulk_replace_records(
        self,
        zone_id: str,
        records: Sequence[Record],
        ctx: Optional[Context] = None,
    ) -> None:
        pass

    @abstractmethod
    def validate(self) -> None:
        '''
        Structural self check without network I/O.

        :raises ConfigurationError: when the provider is not usable
        '''

    def __repr__(self):
        return f'{self.__class__.__name__}[{self.name}]'
