"""Tests for SQLAlchemyBackend.

Runs against a real on-disk SQLite database through aiosqlite; connection
retry behaviour uses a mocked engine.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.dialects import mssql, mysql, postgresql, sqlite
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import create_async_engine

pytest.importorskip("aiosqlite")

from keyvify import KeyValueStore, MISSING
from keyvify.backends.sql_backend import SQLAlchemyBackend, build_url
from keyvify.core.exceptions import NoStorageError


@pytest.fixture
async def backend(tmp_path):
    """Connected backend on a temporary SQLite file."""
    backend = SQLAlchemyBackend("records", database_url=f"sqlite+aiosqlite:///{tmp_path / 'kv.sqlite'}")
    await backend.connect()
    yield backend
    await backend.close()


def test_build_url_sqlite():
    """Test sqlite URLs get the .sqlite suffix and the aiosqlite driver."""
    url = build_url("sqlite", storage="data/app")
    assert url.drivername == "sqlite+aiosqlite"
    assert url.database == "data/app.sqlite"

    assert build_url("sqlite", storage="data/app.sqlite").database == "data/app.sqlite"
    assert build_url("sqlite", storage=":memory:").database == ":memory:"


def test_build_url_sqlite_requires_storage():
    with pytest.raises(NoStorageError):
        build_url("sqlite")


def test_build_url_server_dialects():
    url = build_url("postgres", host="db", port=5432, username="app", password="p@ss", database="main")
    assert url.drivername == "postgresql+asyncpg"
    assert url.host == "db"
    assert url.port == 5432
    assert url.username == "app"
    assert url.password == "p@ss"
    assert url.database == "main"

    assert build_url("mysql", host="db").drivername == "mysql+aiomysql"
    assert build_url("mariadb", host="db").drivername == "mariadb+aiomysql"
    assert build_url("mssql", host="db").drivername == "mssql+aioodbc"


def test_requires_url_or_engine():
    with pytest.raises(ValueError):
        SQLAlchemyBackend("records")


@pytest.mark.asyncio
async def test_point_operations(backend):
    assert await backend.point_get("k") is None

    await backend.upsert("k", '"one"')
    assert await backend.point_get("k") == '"one"'

    await backend.upsert("k", '"two"')
    assert await backend.point_get("k") == '"two"'

    assert await backend.point_delete("k") == 1
    assert await backend.point_delete("k") == 0
    assert await backend.point_get("k") is None


@pytest.mark.asyncio
async def test_upsert_same_value_twice(backend):
    await backend.upsert("k", "1")
    await backend.upsert("k", "1")
    assert await backend.scan_all() == [("k", "1")]


@pytest.mark.asyncio
async def test_scan_and_truncate(backend):
    for i in range(3):
        await backend.upsert(f"k{i}", str(i))

    assert sorted(await backend.scan_all()) == [("k0", "0"), ("k1", "1"), ("k2", "2")]
    assert await backend.truncate_all() == 3
    assert await backend.scan_all() == []
    assert await backend.truncate_all() == 0


@pytest.mark.asyncio
async def test_connect_is_idempotent(backend):
    await backend.upsert("k", "1")
    await backend.connect()
    assert await backend.point_get("k") == "1"


@pytest.mark.asyncio
async def test_tables_are_isolated(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'shared.sqlite'}"
    engine = create_async_engine(url)
    users = SQLAlchemyBackend("users", engine=engine)
    posts = SQLAlchemyBackend("posts", engine=engine)
    await users.connect()
    await posts.connect()

    await users.upsert("k", '"user"')

    assert await posts.point_get("k") is None
    assert await users.point_get("k") == '"user"'

    # Shared engine stays open until its owner disposes it
    await users.close()
    assert await users.point_get("k") == '"user"'
    await engine.dispose()


@pytest.mark.asyncio
async def test_store_over_sqlite(tmp_path):
    """Test the full store contract through the relational backend."""
    store = KeyValueStore("settings", dialect="sqlite", storage=str(tmp_path / "app"))
    async with store:
        assert store.dialect == "relational"
        await store.set("user", {"name": "Ada", "prefs": {"theme": "light"}})
        await store.set(("user", "prefs.theme"), "dark")
        assert (await store.get(("user", "prefs.theme"))).value == "dark"

        store.empty()
        assert (await store.get("user")).value == {"name": "Ada", "prefs": {"theme": "dark"}}
        assert await store.delete("user") == 1
        assert (await store.get("user")).value is MISSING

    assert (tmp_path / "app.sqlite").exists()


@pytest.mark.asyncio
async def test_data_survives_reopen(tmp_path):
    storage = str(tmp_path / "persist")
    async with KeyValueStore("settings", dialect="sqlite", storage=storage) as store:
        await store.set("k", [1, 2, 3])

    async with KeyValueStore("settings", dialect="sqlite", storage=storage) as store:
        assert (await store.get("k")).value == [1, 2, 3]


@pytest.mark.asyncio
async def test_connect_retries_operational_errors():
    """Test connect retries transient connection failures."""
    mock_engine = MagicMock()
    mock_engine.url.drivername = "postgresql+asyncpg"

    backend = SQLAlchemyBackend("records", engine=mock_engine, connect_retries=3)
    attempts = []

    async def flaky_create_table():
        attempts.append(len(attempts) + 1)
        if len(attempts) < 3:
            raise OperationalError("connect", {}, Exception("connection refused"))

    backend._create_table = flaky_create_table

    with patch("asyncio.sleep", new=AsyncMock()):
        await backend.connect()

    assert attempts == [1, 2, 3]


@pytest.mark.asyncio
async def test_connect_gives_up_after_retries():
    backend = SQLAlchemyBackend("records", engine=MagicMock(), connect_retries=2)
    attempts = []

    async def failing_create_table():
        attempts.append(len(attempts) + 1)
        raise OperationalError("connect", {}, Exception("connection refused"))

    backend._create_table = failing_create_table

    with patch("asyncio.sleep", new=AsyncMock()):
        with pytest.raises(OperationalError):
            await backend.connect()

    assert attempts == [1, 2]


@pytest.mark.asyncio
async def test_close_leaves_external_engine():
    mock_engine = MagicMock()
    mock_engine.dispose = AsyncMock()

    backend = SQLAlchemyBackend("records", engine=mock_engine)
    await backend.close()

    mock_engine.dispose.assert_not_called()


@pytest.mark.parametrize(
    "dialect, clause",
    [
        (postgresql.dialect(), "DO UPDATE SET"),
        (sqlite.dialect(), "DO UPDATE SET"),
        (mysql.dialect(), "ON DUPLICATE KEY UPDATE"),
    ],
)
def test_upsert_is_a_single_statement(dialect, clause):
    """Test first writes cannot race into a unique violation."""
    backend = SQLAlchemyBackend("records", engine=MagicMock())

    stmt = backend._upsert_statement(dialect.name, "k", '"v"')

    assert clause in str(stmt.compile(dialect=dialect))


def test_upsert_statement_for_mariadb():
    backend = SQLAlchemyBackend("records", engine=MagicMock())
    assert backend._upsert_statement("mariadb", "k", '"v"') is not None


def test_mssql_falls_back_to_update_then_insert():
    backend = SQLAlchemyBackend("records", engine=MagicMock())
    assert backend._upsert_statement(mssql.dialect().name, "k", '"v"') is None


@pytest.mark.asyncio
async def test_concurrent_first_writes(backend):
    await asyncio.gather(*(backend.upsert("k", str(i)) for i in range(8)))

    rows = await backend.scan_all()
    assert len(rows) == 1
    assert rows[0][0] == "k"
