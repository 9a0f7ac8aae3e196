#
#
#

import logging
import threading
from contextlib import contextmanager
from typing import Dict, List

from .exceptions import ConfigurationError, NotFoundError
from .provider import Provider


class _ReadWriteLock(object):
    '''
    Many concurrent readers or a single writer. Writers wait for active
    readers to drain and block new readers while waiting.
    '''

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self):
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write(self):
        with self._cond:
            self._writers_waiting += 1
            while self._writer or self._readers:
                self._cond.wait()
            self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class Registry(object):
    '''
    Name -> provider directory.

    Constructed once by the application and handed to whatever needs to
    look providers up; there is no module level instance.
    '''

    def __init__(self):
        self.log = logging.getLogger('Registry')
        self._lock = _ReadWriteLock()
        self._providers: Dict[str, Provider] = {}

    def register(self, provider: Provider) -> None:
        name = provider.name
        if not name:
            raise ConfigurationError('provider name cannot be empty')
        with self._lock.write():
            if name in self._providers:
                raise ConfigurationError(
                    f'provider {name} is already registered'
                )
            self._providers[name] = provider
        self.log.debug('register: name=%s', name)

    def get(self, name: str) -> Provider:
        with self._lock.read():
            try:
                return self._providers[name]
            except KeyError:
                raise NotFoundError('DNS provider', name) from None

    def list(self) -> List[Provider]:
        with self._lock.read():
            return list(self._providers.values())

    def names(self) -> List[str]:
        with self._lock.read():
            return list(self._providers.keys())

    def unregister(self, name: str) -> None:
        with self._lock.write():
            self._providers.pop(name, None)

    def clear(self) -> None:
        with self._lock.write():
            self._providers = {}

    def __contains__(self, name):
        with self._lock.read():
            return name in self._providers

    def __len__(self):
        with self._lock.read():
            return len(self._providers)
