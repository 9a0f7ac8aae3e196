#
#
#

"""Protocol definitions for provider transports.

Providers only depend on this structural interface, so tests and bespoke
transports can stand in for ``zonekit.http_client.HTTPClient`` without
inheritance.
"""

from typing import Any, Dict, Optional, Protocol

from .context import Context


class Transport(Protocol):
    """Interface consumed by ``RestProvider`` and the REST adapters.

    Every method returns the decoded JSON body, or None when the response
    has no body.
    """

    def get(
        self,
        path: str,
        params: Optional[Dict[str, str]] = None,
        ctx: Optional[Context] = None,
    ) -> Any:
        """Issue a GET request.

        Args:
            path: Path relative to the base URL
            params: Optional query string parameters
            ctx: Execution context
        """
        ...

    def post(
        self, path: str, body: Any = None, ctx: Optional[Context] = None
    ) -> Any:
        """Issue a POST request with a JSON body."""
        ...

    def put(
        self, path: str, body: Any = None, ctx: Optional[Context] = None
    ) -> Any:
        """Issue a PUT request with a JSON body."""
        ...

    def patch(
        self, path: str, body: Any = None, ctx: Optional[Context] = None
    ) -> Any:
        """Issue a PATCH request with a JSON body."""
        ...

    def delete(self, path: str, ctx: Optional[Context] = None) -> Any:
        """Issue a DELETE request."""
        ...
