#
#
#

import logging
from dataclasses import replace
from typing import Any, Mapping, Optional

from requests import Session

from .auth import new_authenticator
from .config import TYPE_REST, Config
from .exceptions import ConfigurationError
from .http_client import HTTPClient
from .mapper import FieldMapping, Mappings
from .rest import RestProvider

TYPE_NAMECHEAP = 'namecheap'

# Keys assumed when a config leaves a field unmapped. Record ids are never
# assumed, a provider only supports them when its config says so.
FIELD_DEFAULTS = FieldMapping(
    hostname='hostname',
    record_type='record_type',
    address='address',
    ttl='ttl',
    mx_pref='mx_pref',
)

log = logging.getLogger('Builder')


def build_mappings(mappings: Mappings) -> Mappings:
    return replace(
        mappings,
        request=mappings.request.merged(FIELD_DEFAULTS),
        response=mappings.response.merged(FIELD_DEFAULTS),
    )


def validate_config(config: Config) -> None:
    if config is None:
        raise ConfigurationError('config is missing')
    if not config.name:
        raise ConfigurationError('provider name is required')
    if not config.type:
        raise ConfigurationError('provider type is required')
    if not config.api.base_url:
        raise ConfigurationError('API base URL is required')
    if not config.api.endpoints:
        raise ConfigurationError('at least one API endpoint is required')
    if not config.auth.method:
        raise ConfigurationError('authentication method is required')
    if not config.auth.credentials:
        raise ConfigurationError('authentication credentials are required')


def build_provider(
    config: Config,
    base_url: Optional[str] = None,
    headers: Optional[Mapping[str, str]] = None,
    session: Optional[Session] = None,
    environ: Optional[Mapping[str, Any]] = None,
) -> RestProvider:
    '''
    Turn a provider ``Config`` into a validated, ready to use provider.

    ``base_url`` and ``headers`` let an account source override the
    configured endpoint root and add static headers; authentication
    headers always win over both configured and extra headers.
    '''
    if base_url:
        config = replace(config, api=replace(config.api, base_url=base_url))
    validate_config(config)

    if config.type == TYPE_NAMECHEAP:
        raise ConfigurationError(
            'namecheap providers must be created with '
            'zonekit.adapters.namecheap.new()'
        )
    if config.type != TYPE_REST:
        raise ConfigurationError(f'unsupported provider type: {config.type}')

    authenticator = new_authenticator(
        config.auth.method, config.auth.credentials, environ
    )
    log.debug(
        'build_provider: name=%s, base_url=%s, auth=%s',
        config.name,
        config.api.base_url,
        config.auth.method,
    )

    merged = dict(config.api.headers)
    merged.update(headers or {})
    merged.update(authenticator.headers())

    client = HTTPClient(
        config.api.base_url,
        headers=merged,
        timeout=config.api.timeout,
        retries=config.api.retries,
        session=session,
    )
    provider = RestProvider(
        config.name,
        client,
        build_mappings(config.mappings),
        dict(config.api.endpoints),
        dict(config.settings),
    )
    provider.validate()
    return provider
