import json

from pytest import raises

from script_alchemy import *

from .conftest import HOST, SCRIPT_ID, FakeServer, failure, ok

URL = f"{HOST}/projects/{SCRIPT_ID}"
OTHER_URL = f"{HOST}/projects/other"


def test_get_cached(executor: RequestExecutor, server: FakeServer):
    """
    Successful GET populates the cache; the next GET doesn't reach the
    fetcher.
    """
    server.queue("GET", URL, ok({"title": "t"}))

    envelope = executor.execute(URL)
    assert envelope.success
    assert envelope.cached is False

    envelope = executor.execute(URL)
    assert envelope.success
    assert envelope.cached is True
    assert envelope.data == {"title": "t"}

    assert server.calls_to("GET", URL) == 1


def test_query_is_part_of_key(executor: RequestExecutor, server: FakeServer):
    server.queue("GET", f"{URL}?a=1", ok(1))
    server.queue("GET", f"{URL}?a=2", ok(2))

    assert executor.execute(f"{URL}?a=1").data == 1
    assert executor.execute(f"{URL}?a=2").data == 2
    assert executor.execute(f"{URL}?a=1").cached


def test_no_cache(executor: RequestExecutor, server: FakeServer):
    """
    no_cache skips the read but still refreshes the entry.
    """
    server.queue("GET", URL, ok("old"), ok("new"))

    executor.execute(URL)
    envelope = executor.execute(URL, no_cache=True)

    assert envelope.cached is False
    assert envelope.data == "new"
    assert server.calls_to("GET", URL) == 2

    assert executor.execute(URL).data == "new"


def test_failure_not_cached(
    executor: RequestExecutor, server: FakeServer, store: MemoryCacheStore
):
    server.queue("GET", URL, failure(500, "boom"), ok("recovered"))

    assert executor.execute(URL).success is False
    assert URL not in store

    envelope = executor.execute(URL)
    assert envelope.success
    assert envelope.cached is False


def test_ttl(executor: RequestExecutor, server: FakeServer):
    server.queue("GET", URL, ok(1), ok(2))

    executor.execute(URL, ttl_seconds=0)
    envelope = executor.execute(URL)

    assert envelope.cached is False
    assert envelope.data == 2


def test_write_invalidates(
    executor: RequestExecutor, server: FakeServer, store: MemoryCacheStore
):
    """
    Non-GET requests remove the entry for their own URL before dispatch, even
    if they fail, and leave other entries alone.
    """
    server.queue("GET", URL, ok(1), ok(2))
    server.queue("GET", OTHER_URL, ok("other"))
    server.queue("PUT", URL, failure(500, "boom"))

    executor.execute(URL)
    executor.execute(OTHER_URL)

    envelope = executor.execute(URL, RequestOptions(method="PUT", payload={}))
    assert not envelope.success

    assert URL not in store
    assert OTHER_URL in store

    assert executor.execute(URL).data == 2
    assert executor.execute(OTHER_URL).cached


def test_write_not_cached(
    executor: RequestExecutor, server: FakeServer, store: MemoryCacheStore
):
    server.queue("POST", URL, ok({"created": True}))

    executor.execute(URL, RequestOptions(method="POST", payload={}))
    assert URL not in store


def test_encode_payload(executor: RequestExecutor, server: FakeServer):
    server.queue("POST", URL, ok(None))
    server.queue("PUT", URL, ok(None))
    server.queue("PUT", OTHER_URL, ok(None))

    executor.execute(URL, RequestOptions(method="POST", payload={"a": [1]}))
    executor.execute(URL, RequestOptions(method="PUT", payload=[1, 2]))
    executor.execute(
        OTHER_URL,
        RequestOptions(method="PUT", payload="raw", content_type="text/plain"),
    )

    (_, post), (_, put), (_, raw) = server.calls

    assert json.loads(post.payload) == {"a": [1]}
    assert post.content_type == "application/json"

    assert json.loads(put.payload) == [1, 2]
    assert put.content_type == "application/json"

    assert raw.payload == "raw"
    assert raw.content_type == "text/plain"


def test_raise_for_error(executor: RequestExecutor, server: FakeServer):
    server.queue("GET", URL, ok("fine"), failure(403, "Permission denied"))

    envelope = executor.execute(URL)
    assert envelope.raise_for_error() is envelope

    envelope = executor.execute(URL, no_cache=True)

    with raises(RequestError, match="Permission denied") as e:
        envelope.raise_for_error()

    assert e.value.code == 403
    assert e.value.envelope is envelope


def test_raise_for_error_extended():
    """
    Without a server message, the extended detail is used.
    """
    envelope = ResponseEnvelope(
        success=False,
        data="<html>Bad gateway</html>",
        code=502,
        extended=ErrorInfo(message="502 Bad Gateway"),
    )

    with raises(RequestError, match="502 Bad Gateway"):
        envelope.raise_for_error()


def test_uncached_executor(server: FakeServer):
    executor = RequestExecutor(server)
    server.queue("GET", URL, ok(1), ok(2))

    assert executor.execute(URL).data == 1
    assert executor.execute(URL).data == 2
