#
#
#

import logging
import os
from typing import Any, Iterable, List, Mapping, Optional

from .builder import build_provider
from .exceptions import ConfigurationError, ZonekitException
from .openapi import find_spec_file, load_spec
from .registry import Registry

# Providers with hand written adapters register themselves
DEFAULT_SKIP = ('namecheap',)

log = logging.getLogger('Autodiscover')


def discover_and_register(
    registry: Registry,
    base_dir: str,
    strict: bool = False,
    skip: Iterable[str] = DEFAULT_SKIP,
    environ: Optional[Mapping[str, Any]] = None,
) -> List[ZonekitException]:
    '''
    Build and register a provider for every sub-directory of ``base_dir``
    holding an OpenAPI document.

    Directories without a document are skipped silently. Load or build
    failures are collected and returned so one broken provider does not
    hide the others; with ``strict`` the first one is raised after the
    scan. Names already present in ``registry`` are left alone.
    '''
    try:
        entries = sorted(os.listdir(base_dir))
    except OSError as e:
        raise ConfigurationError(
            f'failed to read provider directory {base_dir}: {e}'
        ) from e

    skip = set(skip)
    errors = []
    for name in entries:
        provider_dir = os.path.join(base_dir, name)
        if name.startswith(('.', '_')) or not os.path.isdir(provider_dir):
            continue
        if name in skip:
            log.debug('discover_and_register: skipping %s', name)
            continue

        spec_path = find_spec_file(provider_dir)
        if spec_path is None:
            continue

        try:
            config = load_spec(spec_path).to_provider_config(name)
            provider = build_provider(config, environ=environ)
        except ZonekitException as e:
            log.warning(
                'discover_and_register: unable to build %s, %s', name, e
            )
            errors.append(e)
            continue

        try:
            registry.register(provider)
        except ConfigurationError as e:
            log.warning('discover_and_register: skipping %s, %s', name, e)
            continue
        log.info('discover_and_register: registered %s', name)

    if strict and errors:
        raise errors[0]
    return errors
