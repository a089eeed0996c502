"""
Versioned Client Invoker.

Generic runtime for ClientInterface declarations. Builds each request from
the declaration table, attaches the effective API version, and returns the
response body either directly (sync operations) or as an awaitable
(deferred operations).

Usage:
    client = VersionedClient(GREETER, base_url="http://localhost:8080")
    client.call("say_hello", name="world")               # "Hello, world"
    await client.call("say_hello_two", name="world")     # "Hello 2, world"
"""

import asyncio
from collections.abc import Coroutine
from typing import Any

import httpx

from hello_versioning.client.declaration import ClientInterface, Operation, ReturnMode
from hello_versioning.core.config import get_client_settings
from hello_versioning.core.config_schema import VersioningSchema
from hello_versioning.core.exceptions import ExternalServiceError, RemoteCallError
from hello_versioning.core.logging import get_logger, log_with_source
from hello_versioning.core.versioning import apply_version

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 30.0


class VersionedClient:
    """
    HTTP client driven by a ClientInterface declaration.

    Features:
    - Base URL, timeout and version signal from config/settings/client.yaml
    - Path parameters substituted from keyword arguments
    - Effective version attached as header or query parameter
    - Sync operations block; deferred operations return a coroutine
    - Non-2xx responses raised as RemoteCallError, transport failures
      as ExternalServiceError
    """

    def __init__(
        self,
        interface: ClientInterface,
        base_url: str | None = None,
        timeout: float | None = None,
        versioning: VersioningSchema | None = None,
        http_client: httpx.Client | None = None,
        async_http_client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the client.

        Args:
            interface: Declaration table to serve.
            base_url: Remote service URL. If None, reads client.yaml.
            timeout: Request timeout in seconds. If None, reads client.yaml.
            versioning: Version signal settings. If None, reads client.yaml.
            http_client: Pre-built sync client (e.g. a test client).
            async_http_client: Pre-built async client. Without one, each
                deferred call opens its own AsyncClient on the awaiting loop.
        """
        self.interface = interface
        try:
            config = get_client_settings()
        except Exception as e:
            if base_url is None:
                raise RuntimeError(
                    "Could not determine service URL from config/settings/client.yaml"
                ) from e
            config = None

        self.base_url = (base_url or config.base_url).rstrip("/")
        if timeout is not None:
            self.timeout = timeout
        else:
            self.timeout = config.timeout if config is not None else DEFAULT_TIMEOUT
        if versioning is not None:
            self.versioning = versioning
        else:
            self.versioning = config.versioning if config is not None else VersioningSchema()

        self._client = http_client
        self._async_client = async_http_client
        self._closing: asyncio.Task | None = None

    def _get_client(self) -> httpx.Client:
        """Get or create the blocking HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(base_url=self.base_url, timeout=self.timeout)
        return self._client

    def close(self) -> None:
        """
        Close the blocking client and any injected async client.

        Inside a running event loop the async client is closed by a task
        scheduled on that loop; use aclose() there to wait for it.
        """
        if self._client and not self._client.is_closed:
            self._client.close()
        self._client = None

        async_client, self._async_client = self._async_client, None
        if async_client is None or async_client.is_closed:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(async_client.aclose())
        else:
            self._closing = loop.create_task(async_client.aclose())

    async def aclose(self) -> None:
        """Close both clients."""
        async_client, self._async_client = self._async_client, None
        self.close()
        if async_client and not async_client.is_closed:
            await async_client.aclose()

    def __enter__(self) -> "VersionedClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    async def __aenter__(self) -> "VersionedClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def build_request(self, op_name: str, **params: Any) -> httpx.Request:
        """
        Build the request for an operation without sending it.

        Raises:
            DeclarationError: Unknown operation or bad path parameters.
        """
        op = self.interface.operation(op_name)
        return self._build_request(op, params)

    def _build_request(self, op: Operation, params: dict[str, Any]) -> httpx.Request:
        path = self.interface.expand(op, **params)
        headers: dict[str, str] = {}
        query: dict[str, str] = {}
        apply_version(headers, query, self.interface.effective_version(op), self.versioning)
        return httpx.Request(
            op.method,
            f"{self.base_url}{path}",
            headers=headers,
            params=query or None,
        )

    def call(self, op_name: str, **params: Any) -> str | Coroutine[Any, Any, str]:
        """
        Invoke an operation.

        Returns:
            The response body for sync operations, or a coroutine resolving
            to it for deferred operations. A deferred call sends nothing
            until awaited.

        Raises:
            DeclarationError: Unknown operation or bad path parameters.
            RemoteCallError: Non-2xx response (sync calls).
            ExternalServiceError: Transport failure (sync calls).
        """
        op = self.interface.operation(op_name)
        request = self._build_request(op, params)
        version = self.interface.effective_version(op)

        if op.return_mode is ReturnMode.DEFERRED:
            return self._send_async(op, request, version)
        return self._send(op, request, version)

    def _send(self, op: Operation, request: httpx.Request, version: str | None) -> str:
        self._log_request(op, request, version)
        try:
            response = self._get_client().send(request)
        except httpx.HTTPError as e:
            raise self._transport_failure(op, request, version, e) from e
        return self._read_body(op, request, version, response)

    async def _send_async(
        self, op: Operation, request: httpx.Request, version: str | None,
    ) -> str:
        self._log_request(op, request, version)
        try:
            if self._async_client is not None and not self._async_client.is_closed:
                response = await self._async_client.send(request)
            else:
                # a pooled AsyncClient is bound to the loop that first used it
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.send(request)
        except httpx.HTTPError as e:
            raise self._transport_failure(op, request, version, e) from e
        return self._read_body(op, request, version, response)

    def _log_request(self, op: Operation, request: httpx.Request, version: str | None) -> None:
        log_with_source(
            logger,
            "client",
            "debug",
            "API request",
            operation=op.name,
            method=request.method,
            url=str(request.url),
            version=version,
        )

    def _transport_failure(
        self,
        op: Operation,
        request: httpx.Request,
        version: str | None,
        error: httpx.HTTPError,
    ) -> ExternalServiceError:
        log_with_source(
            logger,
            "client",
            "error",
            "API request failed",
            operation=op.name,
            method=request.method,
            url=str(request.url),
            version=version,
            error=str(error),
        )
        return ExternalServiceError(f"{request.method} {request.url} failed: {error}")

    def _read_body(
        self,
        op: Operation,
        request: httpx.Request,
        version: str | None,
        response: httpx.Response,
    ) -> str:
        log_with_source(
            logger,
            "client",
            "debug",
            "API response",
            operation=op.name,
            method=request.method,
            url=str(request.url),
            version=version,
            status_code=response.status_code,
        )
        if not response.is_success:
            log_with_source(
                logger,
                "client",
                "warning",
                "API call rejected",
                operation=op.name,
                status_code=response.status_code,
                version=version,
            )
            raise RemoteCallError(
                request.method, str(request.url), response.status_code, response.text,
            )
        return response.text
