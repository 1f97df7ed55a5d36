import psycopg
import pytest

from linkgate.errors import DuplicateLinkError, StoreError
from linkgate.models import Link
from linkgate.storage.db_storage import MAX_BIGINT, DBStorage


class DummyCursor:
    def __init__(self, results=None, rowcount=1, error=None, log=None):
        self._results = results or []
        self.rowcount = rowcount
        self._error = error
        self._index = 0
        self._log = log if log is not None else []

    def execute(self, query, params=None):
        self._log.append((query, params))
        if self._error is not None:
            raise self._error
        return self

    def fetchone(self):
        if self._index < len(self._results):
            row = self._results[self._index]
            self._index += 1
            return row
        return None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


class DummyConnection:
    def __init__(self, results=None, rowcount=1, error=None):
        self.results = results
        self.rowcount = rowcount
        self.error = error
        self.autocommit = False
        self.closed = False
        self.queries = []

    def cursor(self, row_factory=None):
        return DummyCursor(results=self.results, rowcount=self.rowcount, error=self.error, log=self.queries)

    def close(self):
        self.closed = True


def _install(monkeypatch, conn):
    calls = []

    def fake_connect(dsn, **kwargs):
        calls.append((dsn, kwargs))
        return conn

    monkeypatch.setattr("psycopg.connect", fake_connect)
    return calls


# ---------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------

def test_get_link_found(monkeypatch):
    conn = DummyConnection(results=[(42, "https://x.com", None)])
    calls = _install(monkeypatch, conn)

    row = DBStorage("fake", connect_timeout=3).get_link(42)
    assert row == Link(id=42, target="https://x.com", expiry=None)
    assert calls == [("fake", {"connect_timeout": 3})]
    assert conn.autocommit is True
    assert conn.closed is True
    assert conn.queries[0][1] == (42,)


def test_get_link_missing(monkeypatch):
    _install(monkeypatch, DummyConnection(results=[]))
    assert DBStorage("fake").get_link(1) is None


def test_get_link_beyond_bigint_skips_query(monkeypatch):
    def boom(*args, **kwargs):
        raise AssertionError("should not connect")

    monkeypatch.setattr("psycopg.connect", boom)
    assert DBStorage("fake").get_link(MAX_BIGINT + 1) is None


def test_save_link_inserted(monkeypatch):
    conn = DummyConnection(rowcount=1)
    _install(monkeypatch, conn)
    DBStorage("fake").save_link(8, "https://x.com", 1_900_000_000)
    query, params = conn.queries[0]
    assert "ON CONFLICT (id) DO NOTHING" in query
    assert params == (8, "https://x.com", 1_900_000_000)


def test_save_link_conflict_raises_duplicate(monkeypatch):
    _install(monkeypatch, DummyConnection(rowcount=0))
    with pytest.raises(DuplicateLinkError):
        DBStorage("fake").save_link(8, "https://x.com")


def test_save_link_out_of_range(monkeypatch):
    _install(monkeypatch, DummyConnection())
    with pytest.raises(StoreError):
        DBStorage("fake").save_link(MAX_BIGINT + 1, "https://x.com")


def test_delete_link(monkeypatch):
    _install(monkeypatch, DummyConnection(rowcount=1))
    assert DBStorage("fake").delete_link(8) is True

    _install(monkeypatch, DummyConnection(rowcount=0))
    assert DBStorage("fake").delete_link(8) is False


def test_query_error_wrapped_as_store_error(monkeypatch):
    conn = DummyConnection(error=psycopg.OperationalError("SELECT secret FROM boom"))
    _install(monkeypatch, conn)
    with pytest.raises(StoreError) as info:
        DBStorage("fake").get_link(1)
    assert "SELECT" not in info.value.message
    assert conn.closed is True


def test_connect_error_wrapped_as_store_error(monkeypatch):
    def refuse(dsn, **kwargs):
        raise psycopg.OperationalError("connection refused")

    monkeypatch.setattr("psycopg.connect", refuse)
    with pytest.raises(StoreError):
        DBStorage("fake").delete_link(1)


def test_ensure_schema_creates_table(monkeypatch):
    conn = DummyConnection()
    _install(monkeypatch, conn)
    DBStorage("fake").ensure_schema()
    assert "CREATE TABLE IF NOT EXISTS links" in conn.queries[0][0]
