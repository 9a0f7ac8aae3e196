#
#
#

# Defined before the submodule imports, http_client reads it at import time
__version__ = __VERSION__ = '1.0.0'

from .auth import new_authenticator  # noqa: E402
from .builder import build_provider  # noqa: E402
from .config import Config, load_config  # noqa: E402
from .context import Context  # noqa: E402
from .exceptions import (  # noqa: E402
    APIError,
    CancelledError,
    ConfigurationError,
    InvalidInputError,
    MappingError,
    NotFoundError,
    UnauthorizedError,
    UnsupportedOperationError,
    ZonekitException,
)
from .models import Capabilities, Record, Zone  # noqa: E402
from .provider import Provider  # noqa: E402
from .registry import Registry  # noqa: E402
from .rest import RestProvider  # noqa: E402

__all__ = [
    'APIError',
    'CancelledError',
    'Capabilities',
    'Config',
    'ConfigurationError',
    'Context',
    'InvalidInputError',
    'MappingError',
    'NotFoundError',
    'Provider',
    'Record',
    'Registry',
    'RestProvider',
    'UnauthorizedError',
    'UnsupportedOperationError',
    'Zone',
    'ZonekitException',
    'build_provider',
    'load_config',
    'new_authenticator',
]
