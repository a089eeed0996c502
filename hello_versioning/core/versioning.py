"""
API Version Signal.

Attaches the API version to outgoing requests and reads it back from
incoming ones. Both sides share VersioningSchema so a client and a server
configured from the same YAML agree on where the version travels.

Strategies:
    header    - X-API-VERSION: 2             (default)
    parameter - /hello/greeting/world?api-version=2
"""

from collections.abc import Mapping, MutableMapping

from hello_versioning.core.config_schema import VersioningSchema


def apply_version(
    headers: MutableMapping[str, str],
    params: MutableMapping[str, str],
    version: str | None,
    settings: VersioningSchema,
) -> None:
    """
    Attach ``version`` to a request being built.

    Args:
        headers: Outgoing request headers, updated in place.
        params: Outgoing query parameters, updated in place.
        version: Version tag, or None for an unversioned call.
        settings: Where the version goes.
    """
    if version is None:
        return
    if settings.strategy == "header":
        headers[settings.header_name] = version
    else:
        params[settings.parameter_name] = version


def resolve_version(
    headers: Mapping[str, str],
    params: Mapping[str, str],
    settings: VersioningSchema,
) -> str | None:
    """
    Read the version from an incoming request.

    The configured strategy is checked first, then the other one, then
    ``settings.default_version``. Headers must be a case-insensitive
    mapping (starlette and httpx both provide one).
    """
    from_header = headers.get(settings.header_name)
    from_param = params.get(settings.parameter_name)

    if settings.strategy == "header":
        candidates = (from_header, from_param)
    else:
        candidates = (from_param, from_header)

    for candidate in candidates:
        if candidate:
            return candidate.strip()
    return settings.default_version
