"""
Client Declarations.

A client interface is described as data: a base path, a default API
version, and a table of operations. The invoker consumes these tables;
nothing here performs I/O.

Usage:
    from hello_versioning.client.declaration import ClientInterface, Operation, ReturnMode

    GREETER = ClientInterface(
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

    op = GREETER.operation("say_hello_two")
    GREETER.effective_version(op)      # "2"
    GREETER.expand(op, name="world")   # "/hello/greeting/world"
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import quote

from hello_versioning.core.exceptions import DeclarationError

_PLACEHOLDER = re.compile(r"\{([^{}]*)\}")

HTTP_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"})


class ReturnMode(str, Enum):
    """How an operation hands its result back to the caller."""

    SYNC = "sync"
    DEFERRED = "deferred"


def _check_version(version: str | None, owner: str) -> None:
    if version is not None and not version.strip():
        raise DeclarationError(f"{owner}: version tag must not be blank")


@dataclass(frozen=True)
class Operation:
    """One remote call: an HTTP method on a path template."""

    name: str
    path: str
    method: str = "GET"
    version: str | None = None
    return_mode: ReturnMode = ReturnMode.SYNC
    placeholders: tuple[str, ...] = field(init=False)

    def __post_init__(self) -> None:
        if not self.name.isidentifier():
            raise DeclarationError(f"Operation name {self.name!r} is not an identifier")
        if not self.path.startswith("/"):
            raise DeclarationError(f"{self.name}: path {self.path!r} must start with '/'")
        method = self.method.upper()
        if method not in HTTP_METHODS:
            raise DeclarationError(f"{self.name}: unsupported HTTP method {self.method!r}")
        _check_version(self.version, self.name)

        names = tuple(_PLACEHOLDER.findall(self.path))
        for placeholder in names:
            if not placeholder.isidentifier():
                raise DeclarationError(
                    f"{self.name}: placeholder {{{placeholder}}} is not an identifier"
                )
        if len(set(names)) != len(names):
            raise DeclarationError(f"{self.name}: duplicate placeholder in {self.path!r}")
        literal = _PLACEHOLDER.sub("", self.path)
        if "{" in literal or "}" in literal:
            raise DeclarationError(f"{self.name}: unbalanced braces in {self.path!r}")

        # frozen dataclass: normalized fields go through object.__setattr__
        object.__setattr__(self, "method", method)
        object.__setattr__(self, "return_mode", ReturnMode(self.return_mode))
        object.__setattr__(self, "placeholders", names)


@dataclass(frozen=True)
class ClientInterface:
    """A named set of operations sharing a base path and default version."""

    base_path: str
    operations: tuple[Operation, ...]
    default_version: str | None = None

    def __post_init__(self) -> None:
        if not self.base_path.startswith("/"):
            raise DeclarationError(f"Base path {self.base_path!r} must start with '/'")
        _check_version(self.default_version, self.base_path)

        operations = tuple(self.operations)
        seen: set[str] = set()
        for op in operations:
            if op.name in seen:
                raise DeclarationError(f"Duplicate operation name {op.name!r}")
            seen.add(op.name)
        object.__setattr__(self, "operations", operations)

    @property
    def operation_names(self) -> tuple[str, ...]:
        return tuple(op.name for op in self.operations)

    def operation(self, name: str) -> Operation:
        """Look up an operation by name."""
        for op in self.operations:
            if op.name == name:
                return op
        raise DeclarationError(
            f"Unknown operation {name!r}; declared: {', '.join(self.operation_names)}"
        )

    def effective_version(self, op: Operation) -> str | None:
        """The operation's own tag if it has one, else the interface default."""
        return op.version if op.version is not None else self.default_version

    def full_path(self, op: Operation) -> str:
        """Base path and operation path joined by a single slash."""
        return self.base_path.rstrip("/") + op.path

    def expand(self, op: Operation, **params: Any) -> str:
        """
        Substitute path parameters into the operation's full path.

        Each value is converted with str() and percent-encoded as a single
        path segment, so "world" stays "world" and "a/b" becomes "a%2Fb".
        A value of exactly "." or ".." is sent as %2E or %2E%2E.

        Raises:
            DeclarationError: If a placeholder has no value or an argument
                matches no placeholder.
        """
        missing = [p for p in op.placeholders if p not in params]
        if missing:
            raise DeclarationError(f"{op.name}: missing path parameter(s) {', '.join(missing)}")
        unexpected = sorted(set(params) - set(op.placeholders))
        if unexpected:
            raise DeclarationError(f"{op.name}: unexpected argument(s) {', '.join(unexpected)}")

        def _substitute(match: re.Match[str]) -> str:
            segment = quote(str(params[match.group(1)]), safe="")
            # "." and ".." would be collapsed as dot segments by URL normalization
            if segment in (".", ".."):
                return segment.replace(".", "%2E")
            return segment

        return _PLACEHOLDER.sub(_substitute, self.full_path(op))
