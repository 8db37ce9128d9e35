"""
XML-RPC Channel.

Synchronous httpx client that carries one XML-RPC call per request.
Every call is a blocking round trip; there are no retries.
"""

from typing import Any

import httpx

from xapi_bridge import __version__
from xapi_bridge.core.exceptions import TransportError
from xapi_bridge.core.logging import get_logger, log_with_source
from xapi_bridge.rpc.codec import decode_response, encode_call
from xapi_bridge.rpc.values import TypedValue

logger = get_logger(__name__)

USER_AGENT = f"xapi-json/{__version__}"


class RPCClient:
    """
    XML-RPC client for an xapi endpoint.

    Features:
    - Request bodies built from TypedValues, responses decoded into TypedValues
    - Structured logging of calls (never of arguments, which carry the session)
    - Every httpx failure, malformed endpoint URLs included, surfaced as TransportError

    Usage:
        with RPCClient("https://xenserver.example") as client:
            result = client.call("session.login_with_password", [Str("root"), Str("pw")])
    """

    def __init__(
        self,
        url: str,
        timeout: float | None = None,
        verify: bool = True,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize the RPC client.

        Args:
            url: Endpoint URL; the XML-RPC document is POSTed here.
            timeout: Request timeout in seconds. None disables the timeout.
            verify: Verify TLS certificates.
            transport: Custom httpx transport (tests use httpx.MockTransport).
        """
        self.url = url
        self.timeout = timeout
        self.verify = verify
        self._transport = transport
        self._client: httpx.Client | None = None

    def _get_client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                timeout=self.timeout,
                verify=self.verify,
                transport=self._transport,
                headers={"Content-Type": "text/xml", "User-Agent": USER_AGENT},
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            self._client.close()
        self._client = None

    def __enter__(self) -> "RPCClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def call(self, method: str, args: list[TypedValue] | tuple[TypedValue, ...]) -> TypedValue:
        """
        Issue one XML-RPC call.

        Args:
            method: Remote method name, e.g. ``VM.get_all``.
            args: Positional parameters in order.

        Returns:
            The decoded response value.

        Raises:
            TransportError: On an invalid URL, connection failure, timeout,
                non-2xx status, fault response or an undecodable body.
        """
        client = self._get_client()
        body = encode_call(method, args)

        log_with_source(logger, "rpc", "debug", "RPC request", method=method, arg_count=len(args))

        try:
            response = client.post(self.url, content=body)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            log_with_source(logger, "rpc", "error", "RPC request failed", method=method, error=str(e))
            raise TransportError(f"{method}: {e}", method=method) from e

        log_with_source(
            logger,
            "rpc",
            "debug",
            "RPC response",
            method=method,
            status_code=response.status_code,
            size=len(response.content),
        )

        try:
            return decode_response(response.content)
        except TransportError as e:
            log_with_source(logger, "rpc", "error", "RPC response rejected", method=method, error=str(e))
            raise TransportError(f"{method}: {e}", method=method, **e.details) from e
