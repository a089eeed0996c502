"""
Declarative HTTP clients.

Describe a remote API as a ClientInterface table and serve it with
VersionedClient. HelloClient is the declaration for the hello service.
"""

from hello_versioning.client.declaration import ClientInterface, Operation, ReturnMode
from hello_versioning.client.hello import (
    HELLO_CLIENT,
    HelloClient,
    close_hello_client,
    get_hello_client,
)
from hello_versioning.client.invoker import VersionedClient

__all__ = [
    "ClientInterface",
    "HELLO_CLIENT",
    "HelloClient",
    "Operation",
    "ReturnMode",
    "VersionedClient",
    "close_hello_client",
    "get_hello_client",
]
