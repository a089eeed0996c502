"""
Hello Service Client.

Client for the versioned "hello" service. Both operations hit
GET /hello/greeting/{name}; they differ only in API version and in how
the result is delivered.

    say_hello      version "1" (interface default)   returns str
    say_hello_two  version "2" (explicit)            returns an awaitable str

Usage:
    client = get_hello_client()
    client.say_hello("world")              # "Hello, world"
    await client.say_hello_two("world")    # "Hello 2, world"
"""

from collections.abc import Awaitable
from typing import cast

import httpx

from hello_versioning.client.declaration import ClientInterface, Operation, ReturnMode
from hello_versioning.client.invoker import VersionedClient
from hello_versioning.core.config_schema import VersioningSchema

HELLO_CLIENT = ClientInterface(
    base_path="/hello",
    default_version="1",
    operations=(
        Operation(name="say_hello", path="/greeting/{name}"),
        Operation(
            name="say_hello_two",
            path="/greeting/{name}",
            version="2",
            return_mode=ReturnMode.DEFERRED,
        ),
    ),
)


class HelloClient(VersionedClient):
    """Typed facade over VersionedClient for HELLO_CLIENT."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        versioning: VersioningSchema | None = None,
        http_client: httpx.Client | None = None,
        async_http_client: httpx.AsyncClient | None = None,
    ):
        super().__init__(
            HELLO_CLIENT,
            base_url=base_url,
            timeout=timeout,
            versioning=versioning,
            http_client=http_client,
            async_http_client=async_http_client,
        )

    def say_hello(self, name: str) -> str:
        """Greet ``name`` using API version 1. Blocks until the reply arrives."""
        return cast(str, self.call("say_hello", name=name))

    def say_hello_two(self, name: str) -> Awaitable[str]:
        """Greet ``name`` using API version 2. Nothing is sent until awaited."""
        return cast(Awaitable[str], self.call("say_hello_two", name=name))


# Module-level client instance
_client: HelloClient | None = None


def get_hello_client() -> HelloClient:
    """Get or create the hello client singleton."""
    global _client
    if _client is None:
        _client = HelloClient()
    return _client


async def close_hello_client() -> None:
    """Close the hello client."""
    global _client
    if _client:
        await _client.aclose()
        _client = None
