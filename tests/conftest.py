"""
Shared test fixtures for the document operations test suite.

Provides: an in-memory stand-in for the async Cosmos client, database and
container proxies, settings, a connection manager wired to the fake client
and a DocumentStore on top of it.
"""

import copy
import itertools
import re
from typing import Any, Dict, List, Optional

import pytest
from azure.cosmos import exceptions as cosmos_exceptions
from pydantic import SecretStr

from config import ConnectionSettings, DocDBSettings, OperationSettings
from connection_management import ConnectionManager
from document_operations import DocumentStore

DATABASE_ID = "testdb"
COLLECTION_ID = "documents"

_QUERY = re.compile(
    r'^SELECT \* FROM c(?: WHERE c((?:\["[^"]+"\])+) (=|!=|<=|>=|<|>) @value)?$'
)
_OPERATORS = {
    "=": lambda a, b: a == b,
    "!=": lambda a, b: a != b,
    "<": lambda a, b: a < b,
    "<=": lambda a, b: a <= b,
    ">": lambda a, b: a > b,
    ">=": lambda a, b: a >= b,
}
_MISSING = object()


def _lookup(document: Dict[str, Any], path: List[str]) -> Any:
    value: Any = document
    for part in path:
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


class FakePage:
    """One page of query results, iterated asynchronously."""

    def __init__(self, items: List[Dict[str, Any]]):
        self._items = items

    async def __aiter__(self):
        for item in self._items:
            yield copy.deepcopy(item)


class FakePageIterator:
    """
    Mimics the page iterator returned by AsyncItemPaged.by_page().

    When the container has leading_empty_pages set, a query started without
    a token first yields that many empty pages, each with a continuation
    token, the way cross-partition queries can.
    """

    def __init__(self, source: "FakeItemPaged", continuation_token: Optional[str]):
        self._source = source
        self._offset_token = continuation_token
        if continuation_token is None and source.leading_empty_pages:
            self._offset_token = f"empty:{source.leading_empty_pages}"
        self._done = False
        self.continuation_token: Optional[str] = None

    def __aiter__(self):
        return self

    async def __anext__(self) -> FakePage:
        if self._done:
            raise StopAsyncIteration
        items = self._source.evaluate()
        if self._offset_token and self._offset_token.startswith("empty:"):
            remaining = int(self._offset_token.split(":", 1)[1]) - 1
            self.continuation_token = f"empty:{remaining}" if remaining else "0"
            self._offset_token = self.continuation_token
            return FakePage([])
        try:
            offset = int(self._offset_token) if self._offset_token else 0
        except ValueError:
            raise cosmos_exceptions.CosmosHttpResponseError(
                status_code=400, message="Invalid continuation token"
            )
        end = offset + self._source.max_item_count
        self.continuation_token = str(end) if end < len(items) else None
        self._offset_token = self.continuation_token
        self._done = self.continuation_token is None
        return FakePage(items[offset:end])


class FakeItemPaged:
    """Lazy query result; the query is only evaluated when pages are fetched."""

    def __init__(self, container: "FakeContainer", query: str,
                 parameters: Optional[List[Dict[str, Any]]], max_item_count: Optional[int]):
        self._container = container
        self._query = query
        self._parameters = parameters or []
        self.max_item_count = max_item_count or 100
        self.leading_empty_pages = container.leading_empty_pages

    def by_page(self, continuation_token: Optional[str] = None) -> FakePageIterator:
        return FakePageIterator(self, continuation_token)

    def evaluate(self) -> List[Dict[str, Any]]:
        if self._container.query_error is not None:
            raise self._container.query_error
        match = _QUERY.match(self._query.strip())
        if not match:
            raise cosmos_exceptions.CosmosHttpResponseError(
                status_code=400, message=f"Syntax error, incorrect syntax near '{self._query[:20]}'"
            )
        documents = list(self._container.documents.values())
        path_text, operator = match.group(1), match.group(2)
        if path_text is None:
            return documents

        path = re.findall(r'\["([^"]+)"\]', path_text)
        value = next(p["value"] for p in self._parameters if p["name"] == "@value")
        compare = _OPERATORS[operator]
        selected = []
        for document in documents:
            field = _lookup(document, path)
            if field is _MISSING:
                continue
            try:
                if compare(field, value):
                    selected.append(document)
            except TypeError:
                continue
        return selected


class FakeContainer:
    """In-memory container proxy with the async Cosmos container API."""

    def __init__(self, database_id: str, container_id: str):
        self.id = container_id
        self._link = f"dbs/{database_id}/colls/{container_id}"
        self._rids = itertools.count(1)
        # documents keyed by self link, in insertion order
        self.documents: Dict[str, Dict[str, Any]] = {}
        self.read_error: Optional[Exception] = None
        self.query_error: Optional[Exception] = None
        self.create_error: Optional[Exception] = None
        self.leading_empty_pages = 0
        self.query_calls: List[Dict[str, Any]] = []
        self.replace_calls = 0
        self.delete_calls: List[Dict[str, Any]] = []

    async def read(self) -> Dict[str, Any]:
        if self.read_error is not None:
            raise self.read_error
        return {"id": self.id, "_self": f"{self._link}/"}

    def _find_id(self, document_id: str) -> Optional[str]:
        for link, document in self.documents.items():
            if document["id"] == document_id:
                return link
        return None

    async def create_item(self, body: Dict[str, Any], enable_automatic_id_generation: bool = False,
                          **kwargs: Any) -> Dict[str, Any]:
        if self.create_error is not None:
            raise self.create_error
        document = copy.deepcopy(body)
        if "id" not in document:
            if not enable_automatic_id_generation:
                raise cosmos_exceptions.CosmosHttpResponseError(
                    status_code=400, message="The input content is invalid because the required properties - 'id; ' - are missing"
                )
            document["id"] = f"generated-{next(self._rids)}"
        if self._find_id(document["id"]) is not None:
            raise cosmos_exceptions.CosmosResourceExistsError(
                status_code=409, message="Entity with the specified id already exists in the system."
            )
        rid = f"rid{next(self._rids)}"
        link = f"{self._link}/docs/{rid}/"
        document.update({"_rid": rid, "_self": link, "_etag": f'"{rid}"', "_ts": 1700000000})
        self.documents[link] = document
        return copy.deepcopy(document)

    async def replace_item(self, item: Any, body: Dict[str, Any], **kwargs: Any) -> Dict[str, Any]:
        self.replace_calls += 1
        link = item["_self"] if isinstance(item, dict) else f"{self._link}/docs/{item}/"
        link = link.rstrip("/") + "/"
        if link not in self.documents:
            raise cosmos_exceptions.CosmosResourceNotFoundError(
                status_code=404, message="Entity with the specified id does not exist in the system."
            )
        if "id" not in body:
            raise cosmos_exceptions.CosmosHttpResponseError(
                status_code=400, message="The input content is invalid because the required properties - 'id; ' - are missing"
            )
        owner = self._find_id(body["id"])
        if owner is not None and owner != link:
            raise cosmos_exceptions.CosmosResourceExistsError(
                status_code=409, message="Entity with the specified id already exists in the system."
            )
        existing = self.documents[link]
        document = {k: v for k, v in copy.deepcopy(body).items() if not k.startswith("_")}
        document.update({k: existing[k] for k in ("_rid", "_self", "_etag")})
        document["_ts"] = existing["_ts"] + 1
        self.documents[link] = document
        return copy.deepcopy(document)

    async def delete_item(self, item: Any, partition_key: Any, **kwargs: Any) -> None:
        self.delete_calls.append({"item": item, "partition_key": partition_key})
        link = item["_self"] if isinstance(item, dict) else f"{self._link}/docs/{item}/"
        if link not in self.documents:
            raise cosmos_exceptions.CosmosResourceNotFoundError(
                status_code=404, message="Entity with the specified id does not exist in the system."
            )
        del self.documents[link]

    def query_items(self, query: str, parameters: Optional[List[Dict[str, Any]]] = None,
                    max_item_count: Optional[int] = None, **kwargs: Any) -> FakeItemPaged:
        self.query_calls.append({"query": query, "parameters": parameters,
                                 "max_item_count": max_item_count, **kwargs})
        return FakeItemPaged(self, query, parameters, max_item_count)


class FakeDatabase:
    """Database proxy handing out fake containers."""

    def __init__(self, database_id: str):
        self.id = database_id
        self.containers: Dict[str, FakeContainer] = {}
        self.read_error: Optional[Exception] = None

    async def read(self) -> Dict[str, Any]:
        if self.read_error is not None:
            raise self.read_error
        return {"id": self.id}

    def get_container_client(self, container_id: str) -> FakeContainer:
        if container_id not in self.containers:
            self.containers[container_id] = FakeContainer(self.id, container_id)
        return self.containers[container_id]


class FakeCosmosClient:
    """Stand-in for azure.cosmos.aio.CosmosClient."""

    def __init__(self):
        self.databases: Dict[str, FakeDatabase] = {}
        self.closed = False

    def get_database_client(self, database_id: str) -> FakeDatabase:
        if database_id not in self.databases:
            self.databases[database_id] = FakeDatabase(database_id)
        return self.databases[database_id]

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_client() -> FakeCosmosClient:
    """Provide a fresh in-memory Cosmos client."""
    return FakeCosmosClient()


@pytest.fixture
def container(fake_client: FakeCosmosClient) -> FakeContainer:
    """Provide the fake container the default collection resolves to."""
    return fake_client.get_database_client(DATABASE_ID).get_container_client(COLLECTION_ID)


@pytest.fixture
def settings() -> DocDBSettings:
    """Provide settings pointing at the fake account."""
    return DocDBSettings(
        connection=ConnectionSettings(
            endpoint="https://fake-account.documents.azure.com:443/",
            auth_key=SecretStr("ZmFrZS1rZXk="),
            database=DATABASE_ID,
            collection=COLLECTION_ID,
        ),
        operations=OperationSettings(default_max_count=50),
    )


@pytest.fixture
def connection_manager(settings: DocDBSettings, fake_client: FakeCosmosClient) -> ConnectionManager:
    """Provide a connection manager whose client factory returns the fake client."""
    return ConnectionManager(settings, client_factory=lambda _: fake_client)


@pytest.fixture
def store(connection_manager: ConnectionManager) -> DocumentStore:
    """Provide a DocumentStore on the fake collection."""
    return DocumentStore(connection_manager)
