#
#
#

"""Authenticators turning a declared method and credentials into headers.

Credential strings of the form ``${ENV_VAR}`` are resolved from the
environment when the authenticator is constructed.
"""

import os
import re
from base64 import b64encode
from typing import Any, Dict, Mapping, Optional

from .exceptions import ConfigurationError

METHOD_API_KEY = 'api_key'
METHOD_BEARER = 'bearer'
METHOD_BASIC = 'basic'
METHOD_OAUTH = 'oauth'
METHOD_CUSTOM = 'custom'

METHODS = (
    METHOD_API_KEY,
    METHOD_BEARER,
    METHOD_BASIC,
    METHOD_OAUTH,
    METHOD_CUSTOM,
)

_ENV_REF = re.compile(r'^\$\{([^}]+)\}$')


def resolve_value(
    value: Any, environ: Optional[Mapping[str, str]] = None
) -> str:
    """Resolve ``${ENV_VAR}`` references, other strings pass through."""
    if not isinstance(value, str):
        return ''
    match = _ENV_REF.match(value)
    if match:
        environ = os.environ if environ is None else environ
        return environ.get(match.group(1), '')
    return value


def is_env_reference(value: Any) -> bool:
    return isinstance(value, str) and bool(_ENV_REF.match(value))


class Authenticator:
    method = None

    def headers(self) -> Dict[str, str]:
        raise NotImplementedError('Abstract base class, headers missing')

    def validate(self) -> None:
        pass


class APIKeyAuthenticator(Authenticator):
    method = METHOD_API_KEY
    DEFAULT_HEADER = 'X-API-Key'

    def __init__(self, api_key: str, email: str = '', header: str = ''):
        self.api_key = api_key
        self.email = email
        self.header = header or self.DEFAULT_HEADER

    @classmethod
    def from_credentials(cls, credentials, environ=None):
        api_key = resolve_value(credentials.get('api_key'), environ)
        if not api_key:
            raise ConfigurationError(
                'api_key is required for api_key authentication'
            )
        header = resolve_value(
            credentials.get('header') or credentials.get('header_name'),
            environ,
        )
        return cls(
            api_key,
            email=resolve_value(credentials.get('email'), environ),
            header=header,
        )

    def headers(self):
        ret = {}
        if self.email:
            ret['X-Auth-Email'] = self.email
        if self.header.lower() == 'authorization':
            ret['Authorization'] = f'Bearer {self.api_key}'
        else:
            ret[self.header] = self.api_key
        return ret

    def validate(self):
        if not self.api_key:
            raise ConfigurationError('API key is empty')


class BearerAuthenticator(Authenticator):
    method = METHOD_BEARER

    def __init__(self, token: str):
        self.token = token

    @classmethod
    def from_credentials(cls, credentials, environ=None):
        token = resolve_value(credentials.get('token'), environ)
        if not token:
            raise ConfigurationError(
                'token is required for bearer authentication'
            )
        return cls(token)

    def headers(self):
        return {'Authorization': f'Bearer {self.token}'}

    def validate(self):
        if not self.token:
            raise ConfigurationError('bearer token is empty')


class BasicAuthenticator(Authenticator):
    method = METHOD_BASIC

    def __init__(self, username: str, password: str):
        self.username = username
        self.password = password

    @classmethod
    def from_credentials(cls, credentials, environ=None):
        username = resolve_value(credentials.get('username'), environ)
        password = resolve_value(credentials.get('password'), environ)
        if not username or not password:
            raise ConfigurationError(
                'username and password are required for basic authentication'
            )
        return cls(username, password)

    def headers(self):
        encoded = b64encode(
            f'{self.username}:{self.password}'.encode('utf-8')
        ).decode('ascii')
        return {'Authorization': f'Basic {encoded}'}

    def validate(self):
        if not self.username or not self.password:
            raise ConfigurationError('username or password is empty')


class OAuthAuthenticator(Authenticator):
    '''
    OAuth access tokens are obtained out of band and sent as Bearer tokens.
    '''

    method = METHOD_OAUTH

    def __init__(self, access_token: str):
        self.access_token = access_token

    @classmethod
    def from_credentials(cls, credentials, environ=None):
        token = resolve_value(
            credentials.get('access_token') or credentials.get('token'),
            environ,
        )
        if not token:
            raise ConfigurationError(
                'access_token is required for oauth authentication'
            )
        return cls(token)

    def headers(self):
        return {'Authorization': f'Bearer {self.access_token}'}

    def validate(self):
        if not self.access_token:
            raise ConfigurationError('OAuth access token is empty')


class CustomAuthenticator(Authenticator):
    method = METHOD_CUSTOM

    def __init__(self, headers: Dict[str, str]):
        self._headers = dict(headers)

    @classmethod
    def from_credentials(cls, credentials, environ=None):
        raw = credentials.get('headers') or {}
        if not isinstance(raw, dict):
            raise ConfigurationError(
                'custom authentication headers must be a map'
            )
        return cls({k: resolve_value(v, environ) for k, v in raw.items()})

    def headers(self):
        return dict(self._headers)

    def validate(self):
        if not self._headers:
            raise ConfigurationError(
                'custom authenticator requires at least one header'
            )


_AUTHENTICATORS = {
    METHOD_API_KEY: APIKeyAuthenticator,
    METHOD_BEARER: BearerAuthenticator,
    METHOD_BASIC: BasicAuthenticator,
    METHOD_OAUTH: OAuthAuthenticator,
    METHOD_CUSTOM: CustomAuthenticator,
}


def new_authenticator(
    method: str,
    credentials: Optional[Mapping[str, Any]],
    environ: Optional[Mapping[str, str]] = None,
) -> Authenticator:
    try:
        klass = _AUTHENTICATORS[method]
    except KeyError:
        raise ConfigurationError(
            f'unsupported authentication method: {method}'
        ) from None
    authenticator = klass.from_credentials(credentials or {}, environ)
    authenticator.validate()
    return authenticator
