"""Unit tests for VersionedClient."""

import asyncio
import inspect

import httpx
import pytest

from hello_versioning.client.declaration import ClientInterface, Operation, ReturnMode
from hello_versioning.client.invoker import VersionedClient
from hello_versioning.core.exceptions import (
    DeclarationError,
    ExternalServiceError,
    RemoteCallError,
)

BASE_URL = "http://test:8000"

GREETER = ClientInterface(
    base_path="/hello",
    default_version="1",
    operations=(
        Operation(name="now", path="/greeting/{name}"),
        Operation(
            name="later",
            path="/greeting/{name}",
            version="2",
            return_mode=ReturnMode.DEFERRED,
        ),
    ),
)


def _client(handler, **kwargs) -> VersionedClient:
    transport = httpx.MockTransport(handler)
    return VersionedClient(
        GREETER,
        base_url=BASE_URL,
        http_client=httpx.Client(transport=transport),
        async_http_client=httpx.AsyncClient(transport=transport),
        **kwargs,
    )


class TestInitialization:
    def test_explicit_base_url_strips_trailing_slash(self):
        client = VersionedClient(GREETER, base_url="http://test:8000/")
        assert client.base_url == "http://test:8000"

    def test_reads_client_yaml_by_default(self):
        client = VersionedClient(GREETER)

        assert client.base_url == "http://127.0.0.1:8080"
        assert client.timeout == 30
        assert client.versioning.strategy == "header"

    def test_explicit_values_win_over_config(self, parameter_versioning):
        client = VersionedClient(
            GREETER, base_url="http://other", timeout=1.5, versioning=parameter_versioning,
        )

        assert client.timeout == 1.5
        assert client.versioning.strategy == "parameter"

    def test_without_config_requires_base_url(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        with pytest.raises(RuntimeError, match="Could not determine service URL"):
            VersionedClient(GREETER)

    def test_without_config_uses_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        client = VersionedClient(GREETER, base_url="http://svc")

        assert client.timeout == 30.0
        assert client.versioning.header_name == "X-API-VERSION"


class TestBuildRequest:
    def test_default_version_header(self, header_versioning):
        client = VersionedClient(GREETER, base_url=BASE_URL, versioning=header_versioning)

        request = client.build_request("now", name="world")

        assert request.method == "GET"
        assert str(request.url) == "http://test:8000/hello/greeting/world"
        assert request.headers["X-API-VERSION"] == "1"

    def test_explicit_version_header(self, header_versioning):
        client = VersionedClient(GREETER, base_url=BASE_URL, versioning=header_versioning)

        request = client.build_request("later", name="world")

        assert request.headers["X-API-VERSION"] == "2"

    def test_parameter_strategy(self, parameter_versioning):
        client = VersionedClient(GREETER, base_url=BASE_URL, versioning=parameter_versioning)

        request = client.build_request("later", name="world")

        assert request.url.path == "/hello/greeting/world"
        assert request.url.params["api-version"] == "2"
        assert "X-API-VERSION" not in request.headers

    def test_unversioned_operation_sends_no_signal(self, header_versioning):
        iface = ClientInterface(base_path="/svc", operations=(Operation(name="a", path="/a"),))
        client = VersionedClient(iface, base_url=BASE_URL, versioning=header_versioning)

        request = client.build_request("a")

        assert "X-API-VERSION" not in request.headers
        assert not request.url.params

    def test_dot_dot_name_stays_inside_greeting_path(self, header_versioning):
        client = VersionedClient(GREETER, base_url=BASE_URL, versioning=header_versioning)

        request = client.build_request("now", name="..")

        assert request.url.raw_path == b"/hello/greeting/%2E%2E"
        assert request.url.path.startswith("/hello/greeting/")

    def test_unknown_operation(self):
        client = VersionedClient(GREETER, base_url=BASE_URL)

        with pytest.raises(DeclarationError):
            client.build_request("nope")


class TestSyncCall:
    def test_returns_body_text(self, recorder):
        client = _client(recorder)

        assert client.call("now", name="world") == "v1:world"
        assert len(recorder.requests) == 1
        assert recorder.requests[0].url.path == "/hello/greeting/world"

    def test_non_2xx_raises_remote_call_error(self, make_recorder):
        handler = make_recorder(lambda request: httpx.Response(404, text="no route"))
        client = _client(handler)

        with pytest.raises(RemoteCallError) as exc_info:
            client.call("now", name="world")

        assert exc_info.value.status_code == 404
        assert exc_info.value.body == "no route"
        assert exc_info.value.url == "http://test:8000/hello/greeting/world"
        assert exc_info.value.code == "REMOTE_CALL_FAILED"

    def test_transport_error_raises_external_service_error(self, make_recorder):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = _client(make_recorder(refuse))

        with pytest.raises(ExternalServiceError) as exc_info:
            client.call("now", name="world")

        assert not isinstance(exc_info.value, RemoteCallError)
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    def test_bad_arguments_fail_before_sending(self, recorder):
        client = _client(recorder)

        with pytest.raises(DeclarationError):
            client.call("now")

        assert recorder.requests == []


class TestDeferredCall:
    @pytest.mark.asyncio
    async def test_returns_awaitable_resolving_to_body(self, recorder):
        client = _client(recorder)

        result = client.call("later", name="world")

        assert inspect.isawaitable(result)
        assert await result == "v2:world"

    @pytest.mark.asyncio
    async def test_nothing_sent_until_awaited(self, recorder):
        client = _client(recorder)

        pending = client.call("later", name="world")
        assert recorder.requests == []

        await pending
        assert len(recorder.requests) == 1

    @pytest.mark.asyncio
    async def test_failure_surfaces_on_await(self, make_recorder):
        client = _client(make_recorder(lambda request: httpx.Response(500)))

        pending = client.call("later", name="world")

        with pytest.raises(RemoteCallError) as exc_info:
            await pending
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_transport_error_surfaces_on_await(self, make_recorder):
        def time_out(request):
            raise httpx.ReadTimeout("too slow", request=request)

        client = _client(make_recorder(time_out))

        with pytest.raises(ExternalServiceError):
            await client.call("later", name="world")


class TestLifecycle:
    def test_lazy_sync_client_created_and_closed(self):
        client = VersionedClient(GREETER, base_url=BASE_URL)

        inner = client._get_client()
        assert client._get_client() is inner

        client.close()
        assert client._client is None
        assert inner.is_closed

    def test_context_manager_closes(self):
        with VersionedClient(GREETER, base_url=BASE_URL) as client:
            inner = client._get_client()

        assert inner.is_closed

    def test_context_manager_closes_injected_async_client(self, recorder):
        with _client(recorder) as client:
            async_inner = client._async_client

        assert async_inner.is_closed
        assert client._async_client is None

    @pytest.mark.asyncio
    async def test_close_inside_running_loop_schedules_async_close(self, recorder):
        client = _client(recorder)
        async_inner = client._async_client

        client.close()
        await client._closing

        assert async_inner.is_closed

    @pytest.mark.asyncio
    async def test_async_context_manager_closes_both(self, recorder):
        async with _client(recorder) as client:
            sync_inner = client._get_client()
            async_inner = client._async_client

        assert sync_inner.is_closed
        assert async_inner.is_closed
        assert client._async_client is None

    def test_deferred_calls_without_injected_client_survive_new_loops(self, monkeypatch):
        seen = []

        async def send(self, request, **kwargs):
            seen.append(asyncio.get_running_loop())
            return httpx.Response(200, text="v2:world", request=request)

        monkeypatch.setattr(httpx.AsyncClient, "send", send)
        client = VersionedClient(GREETER, base_url=BASE_URL)

        assert asyncio.run(client.call("later", name="world")) == "v2:world"
        assert asyncio.run(client.call("later", name="world")) == "v2:world"
        assert len(seen) == 2
        assert seen[0] is not seen[1]
        assert client._async_client is None

    def test_lazy_client_uses_base_url_and_timeout(self):
        client = VersionedClient(GREETER, base_url=BASE_URL, timeout=4.0)

        inner = client._get_client()

        assert inner.base_url.host == "test"
        assert inner.base_url.port == 8000
        assert inner.timeout.read == 4.0
        client.close()
