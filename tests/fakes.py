"""In-memory stand-ins shared by the test suite."""

import copy
import uuid

from app.infrastructure.db.gateway import GatewayError, NotFoundError, split_filter_key

USER_ID = "11111111-1111-1111-1111-111111111111"
OTHER_USER_ID = "22222222-2222-2222-2222-222222222222"


class FakeGateway:
    """In-memory PersistenceGateway with the same filter suffixes as the SQL one.

    ``fail_on`` names collections whose queries raise GatewayError.
    """

    def __init__(self, data=None):
        self.data = {name: [dict(r) for r in rows] for name, rows in (data or {}).items()}
        self.fail_on: set[str] = set()
        self.calls: list[tuple[str, str]] = []

    def _rows(self, collection):
        return self.data.setdefault(collection, [])

    @staticmethod
    def _match(row, key, value):
        field_name, op = split_filter_key(key)
        actual = row.get(field_name)
        if op is None:
            return actual == value
        if op == "isnull":
            return (actual is None) == bool(value)
        if op == "ne":
            return actual is None or actual != value
        if op == "in":
            return actual in list(value)
        if actual is None:
            return False
        if op == "gte":
            return actual >= value
        if op == "lte":
            return actual <= value
        if op == "gt":
            return actual > value
        return actual < value

    async def query(self, collection, filters=None, order_by=None):
        self.calls.append(("query", collection))
        if collection in self.fail_on:
            raise GatewayError(f"Query on {collection} failed")
        rows = [
            r for r in self._rows(collection)
            if all(self._match(r, k, v) for k, v in (filters or {}).items())
        ]
        for key in reversed(list(order_by or [])):
            field_name = key.lstrip("-")
            rows.sort(
                key=lambda r: (r.get(field_name) is None, r.get(field_name) or 0),
                reverse=key.startswith("-"),
            )
        return copy.deepcopy(rows)

    async def get(self, collection, record_id):
        self.calls.append(("get", collection))
        for row in self._rows(collection):
            if str(row.get("id")) == str(record_id):
                return copy.deepcopy(row)
        raise NotFoundError(collection, record_id)

    async def insert(self, collection, record):
        self.calls.append(("insert", collection))
        row = dict(record)
        row.setdefault("id", str(uuid.uuid4()))
        self._rows(collection).append(row)
        return copy.deepcopy(row)

    async def update(self, collection, record):
        self.calls.append(("update", collection))
        for row in self._rows(collection):
            if str(row.get("id")) == str(record.get("id")):
                row.update(record)
                return copy.deepcopy(row)
        raise NotFoundError(collection, record.get("id"))

    async def delete(self, collection, record):
        self.calls.append(("delete", collection))
        rows = self._rows(collection)
        for i, row in enumerate(rows):
            if str(row.get("id")) == str(record.get("id")):
                return rows.pop(i)
        raise NotFoundError(collection, record.get("id"))


class FakeRedis:
    """The three async string commands the business cache uses."""

    def __init__(self):
        self.store: dict[str, str] = {}
        self.ttl: dict[str, int] = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        self.store[key] = value
        self.ttl[key] = ex

    async def delete(self, key):
        self.store.pop(key, None)
