#
#
#

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

RECORD_TYPE_A = 'A'
RECORD_TYPE_AAAA = 'AAAA'
RECORD_TYPE_CNAME = 'CNAME'
RECORD_TYPE_MX = 'MX'
RECORD_TYPE_TXT = 'TXT'
RECORD_TYPE_NS = 'NS'
RECORD_TYPE_SRV = 'SRV'
RECORD_TYPE_CAA = 'CAA'

DEFAULT_RECORD_TYPES = (
    RECORD_TYPE_A,
    RECORD_TYPE_AAAA,
    RECORD_TYPE_CNAME,
    RECORD_TYPE_MX,
    RECORD_TYPE_TXT,
    RECORD_TYPE_NS,
    RECORD_TYPE_SRV,
    RECORD_TYPE_CAA,
)

DEFAULT_TTL = 1800
MIN_TTL = 60
MAX_TTL = 86400
DEFAULT_MX_PREF = 10


@dataclass(frozen=True)
class Zone:
    """A provider's managed DNS domain."""

    id: str
    name: str
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class Record:
    """One DNS resource record in canonical, provider-agnostic form.

    ``id`` is empty for providers that do not expose record identifiers.
    ``address`` is the single-value field used by simple record types while
    ``priority``, ``weight``, ``port`` and ``target`` carry SRV/MX data.
    ``raw`` keeps the untransformed provider payload.
    """

    hostname: str = ''
    record_type: str = ''
    address: str = ''
    ttl: int = 0
    mx_pref: int = 0
    priority: int = 0
    weight: int = 0
    port: int = 0
    target: str = ''
    id: str = ''
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)
    raw: Optional[Dict[str, Any]] = field(default=None, compare=False)

    @property
    def key(self) -> Tuple[str, str]:
        """Identity used when the provider has no record IDs."""
        return (self.hostname, self.record_type)

    def evolve(self, **changes) -> 'Record':
        return replace(self, **changes)


@dataclass(frozen=True)
class Capabilities:
    supports_record_id: bool = False
    supports_bulk_replace: bool = False
    supports_zone_discovery: bool = False
    is_bulk_replace_atomic: bool = False
    supported_record_types: Tuple[str, ...] = ()

    def supports_type(self, record_type: str) -> bool:
        return record_type in self.supported_record_types
