#
#
#

from octodns.provider import ProviderException


class ZonekitException(ProviderException):
    pass


class ConfigurationError(ZonekitException):
    def __init__(self, message):
        super().__init__(f'configuration error: {message}')
        self.message = message


class NotFoundError(ZonekitException):
    def __init__(self, resource='resource', id=''):
        if id:
            msg = f"{resource} '{id}' not found"
        else:
            msg = f'{resource} not found'
        super().__init__(msg)
        self.resource = resource
        self.id = id


class InvalidInputError(ZonekitException):
    def __init__(self, field, message):
        if field:
            msg = f'invalid input {field}: {message}'
        else:
            msg = f'invalid input: {message}'
        super().__init__(msg)
        self.field = field
        self.message = message


class APIError(ZonekitException):
    def __init__(self, operation, message, status_code=None):
        if operation:
            msg = f'API error in {operation}: {message}'
        else:
            msg = f'API error: {message}'
        super().__init__(msg)
        self.operation = operation
        self.message = message
        self.status_code = status_code


class UnauthorizedError(APIError):
    def __init__(self, operation=''):
        super().__init__(operation, 'Unauthorized', status_code=401)


class UnsupportedOperationError(ZonekitException):
    def __init__(self, operation, provider):
        super().__init__(f'{operation} not supported by {provider}')
        self.operation = operation
        self.provider = provider


class MappingError(ZonekitException, ValueError):
    pass


class CancelledError(ZonekitException):
    def __init__(self, reason='context cancelled'):
        super().__init__(reason)
        self.reason = reason
