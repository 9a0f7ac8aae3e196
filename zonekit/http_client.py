#
#
#

import logging
from typing import Any, Dict, Optional

from requests import RequestException, Session
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from octodns import __VERSION__ as octodns_version

from . import __version__ as package_version
from .context import Context, ensure
from .exceptions import APIError, NotFoundError, UnauthorizedError

DEFAULT_TIMEOUT = 30
DEFAULT_RETRIES = 3
RETRY_STATUSES = (429, 500, 502, 503, 504)
USER_AGENT = f'zonekit/{package_version} octodns/{octodns_version}'


def build_session(
    session: Optional[Session] = None,
    headers: Optional[Dict[str, str]] = None,
    retries: int = DEFAULT_RETRIES,
) -> Session:
    '''
    requests session with the zonekit User-Agent and urllib3 retries on
    throttling and transient server errors.
    '''
    session = session if session is not None else Session()
    session.headers.update({'User-Agent': USER_AGENT})
    if headers:
        session.headers.update(headers)
    retry = Retry(
        total=retries,
        backoff_factor=1,
        status_forcelist=RETRY_STATUSES,
        allowed_methods={'GET', 'POST', 'PUT', 'PATCH', 'DELETE'},
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount('https://', adapter)
    session.mount('http://', adapter)
    return session


class HTTPClient(object):
    '''
    requests based transport shared by the REST providers.

    Retries on throttling and transient server errors are delegated to
    urllib3's ``Retry``; everything else surfaces as an ``APIError``.
    '''

    DEFAULT_TIMEOUT = DEFAULT_TIMEOUT
    DEFAULT_RETRIES = DEFAULT_RETRIES

    def __init__(
        self,
        base_url: str,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
        retries: Optional[int] = None,
        session: Optional[Session] = None,
    ):
        self.log = logging.getLogger(f'HTTPClient[{base_url}]')
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self.retries = retries or self.DEFAULT_RETRIES

        merged = {'Accept': 'application/json'}
        merged.update(headers or {})
        self._session = build_session(session, merged, self.retries)

    @property
    def headers(self) -> Dict[str, str]:
        return dict(self._session.headers)

    def _do(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, str]] = None,
        data: Any = None,
        ctx: Optional[Context] = None,
    ):
        ctx = ensure(ctx)
        timeout = ctx.timeout(self.timeout)
        # after the timeout so an exhausted deadline never reaches urllib3
        ctx.check()
        url = f'{self.base_url}{path}'
        self.log.debug('_do: method=%s, path=%s', method, path)
        try:
            response = self._session.request(
                method,
                url,
                params=params,
                json=data,
                timeout=timeout,
            )
        except RequestException as e:
            raise APIError(method, f'request to {path} failed: {e}') from e
        if response.status_code == 401:
            raise UnauthorizedError(method)
        if response.status_code == 404:
            raise NotFoundError('resource', path)
        if not response.ok:
            raise APIError(
                method,
                f'request failed with status {response.status_code}: '
                f'{response.text[:400]}',
                status_code=response.status_code,
            )
        return response

    def _do_json(self, method, path, params=None, data=None, ctx=None):
        response = self._do(method, path, params, data, ctx)
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise APIError(
                method, f'failed to decode JSON response from {path}'
            ) from e

    def get(self, path, params=None, ctx=None):
        return self._do_json('GET', path, params=params, ctx=ctx)

    def post(self, path, body=None, ctx=None):
        return self._do_json('POST', path, data=body, ctx=ctx)

    def put(self, path, body=None, ctx=None):
        return self._do_json('PUT', path, data=body, ctx=ctx)

    def patch(self, path, body=None, ctx=None):
        return self._do_json('PATCH', path, data=body, ctx=ctx)

    def delete(self, path, ctx=None):
        return self._do_json('DELETE', path, ctx=ctx)
