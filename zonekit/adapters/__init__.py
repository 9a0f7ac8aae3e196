#
#
#

from ..exceptions import ConfigurationError
from ..models import RECORD_TYPE_SRV


def require_client(client, provider: str) -> None:
    if client is None:
        raise ConfigurationError(f'{provider} client is not initialized')


def srv_target_to_address(record):
    '''
    Providers that keep the SRV target in their single value field expect
    it in ``address``.
    '''
    if (
        record.record_type == RECORD_TYPE_SRV
        and not record.address
        and record.target
    ):
        return record.evolve(address=record.target)
    return record


def srv_address_to_target(record):
    if (
        record.record_type == RECORD_TYPE_SRV
        and not record.target
        and record.address
    ):
        return record.evolve(target=record.address)
    return record
