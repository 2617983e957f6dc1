import json
import logging
from typing import Any, Generator
from urllib.parse import urlsplit

from pytest import FixtureRequest, fixture

from script_alchemy import (
    BaseFetcher,
    CacheGateway,
    ErrorInfo,
    MemoryCacheStore,
    RequestExecutor,
    RequestOptions,
    ResponseEnvelope,
    Session,
)

logging.basicConfig(level=logging.WARNING)

HOST = "https://script.example.com/v1"
SCRIPT_ID = "script1"

MARKERS = [
    "files",
]


def pytest_configure(config) -> None:
    for marker in MARKERS:
        config.addinivalue_line("markers", marker)


class FakeServer(BaseFetcher):
    """
    In-process stand-in for the remote API.

    Serves and stores project content; any other request is answered from
    queued responses registered with `queue()`, which also take priority
    over content handling.
    """

    projects: dict[str, list[dict[str, Any]]]
    """Mapping of script id to its files"""

    calls: list[tuple[str, RequestOptions]]
    """Every (url, options) received, in order"""

    closed: bool

    _queued: dict[tuple[str, str], list[ResponseEnvelope]]

    def __init__(self):
        self.projects = dict()
        self.calls = list()
        self.closed = False
        self._queued = dict()

    def queue(self, method: str, url: str, *envelopes: ResponseEnvelope):
        self._queued.setdefault((method, url), []).extend(envelopes)

    def calls_to(self, method: str, url: str) -> int:
        return len(
            [c for c in self.calls if c[0] == url and c[1].method == method]
        )

    @property
    def puts(self) -> list[dict[str, Any]]:
        """Decoded payloads of every PUT received"""
        return [
            json.loads(o.payload) for _, o in self.calls if o.method == "PUT"
        ]

    def execute(self, url: str, options: RequestOptions) -> ResponseEnvelope:
        self.calls.append((url, options))

        queued = self._queued.get((options.method, url))
        if queued:
            return queued.pop(0)

        path = urlsplit(url).path.removeprefix(urlsplit(HOST).path)
        parts = path.strip("/").split("/")

        if len(parts) == 3 and parts[0] == "projects" and parts[2] == "content":
            return self._content(parts[1], options)

        return failure(404, "Not found")

    def close(self):
        self.closed = True

    def _content(
        self, script_id: str, options: RequestOptions
    ) -> ResponseEnvelope:
        if script_id not in self.projects:
            return failure(404, f"Requested entity was not found: {script_id}")

        if options.method == "PUT":
            self.projects[script_id] = json.loads(options.payload)["files"]

        return ok({"scriptId": script_id, "files": self.projects[script_id]})


def ok(data: Any, code: int = 200, **kwargs) -> ResponseEnvelope:
    return ResponseEnvelope(
        success=True,
        data=data,
        code=code,
        parsed=True,
        content=json.dumps(data),
        **kwargs,
    )


def failure(code: int, message: str) -> ResponseEnvelope:
    data = {"error": {"code": code, "message": message}}
    return ResponseEnvelope(
        success=False,
        data=data,
        code=code,
        parsed=True,
        content=json.dumps(data),
        extended=ErrorInfo(message=f"HTTP {code}", code=code),
    )


def file(
    name: str, type: str = "SERVER_JS", source: str = ""
) -> dict[str, str]:
    return {"name": name, "type": type, "source": source}


def manifest(source: str = "{}") -> dict[str, str]:
    return file("appsscript", "JSON", source)


@fixture
def server(request: FixtureRequest) -> FakeServer:
    """
    Create a fake server with one project. Its initial files can be set
    with `@mark.files([...])`.
    """
    server = FakeServer()

    marker = request.node.get_closest_marker("files")
    server.projects[SCRIPT_ID] = list(marker.args[0]) if marker else []

    return server


@fixture
def store() -> MemoryCacheStore:
    return MemoryCacheStore()


@fixture
def executor(server: FakeServer, store: MemoryCacheStore) -> RequestExecutor:
    return RequestExecutor(server, CacheGateway(store))


@fixture
def session(
    server: FakeServer, store: MemoryCacheStore
) -> Generator[Session, None, None]:
    session = Session(host=HOST, fetcher=server, cache_store=store)
    yield session
    session.close()
