import pytest

from pgmapper.config import ConnectionConfig
from pgmapper.database_operations import DatabaseOperations, affected_rows
from pgmapper.db_context import track_queries
from pgmapper.exceptions import ExecutionFailure


class FakeConnection:
    def __init__(self, status="INSERT 0 1", rows=None, error=None):
        self.status = status
        self.rows = rows or []
        self.error = error
        self.executed: list[tuple[str, tuple]] = []
        self.closed = False

    async def execute(self, query, *args):
        self.executed.append((query, args))
        if self.error:
            raise self.error
        return self.status

    async def fetch(self, query, *args):
        self.executed.append((query, args))
        if self.error:
            raise self.error
        return self.rows

    async def close(self):
        self.closed = True


@pytest.fixture
def connections(monkeypatch):
    """Replace asyncpg.connect, returning the list of connections handed out"""
    opened: list[FakeConnection] = []
    dsns: list[str] = []

    def install(**kwargs):
        async def connect(dsn):
            dsns.append(dsn)
            conn = FakeConnection(**kwargs)
            opened.append(conn)
            return conn

        monkeypatch.setattr("asyncpg.connect", connect)
        return opened, dsns

    return install


class TestAffectedRows:
    @pytest.mark.parametrize(
        ("status", "expected"),
        [("INSERT 0 1", 1), ("UPDATE 3", 3), ("DELETE 0", 0), ("", 0), ("CREATE TABLE", 0)],
    )
    def test_parse_status(self, status, expected):
        assert affected_rows(status) == expected


class TestDatabaseOperations:
    @pytest.mark.asyncio
    async def test_one_connection_per_statement(self, connections):
        opened, dsns = connections(status="UPDATE 1")
        ops = DatabaseOperations(ConnectionConfig(dsn="postgresql://u:p@db/app"))

        assert await ops.execute_update("UPDATE t SET a=$1 WHERE id=$2;", ["x", 1]) == 1
        assert await ops.execute_update("UPDATE t SET a=$1 WHERE id=$2;", ["y", 2]) == 1

        assert len(opened) == 2
        assert all(conn.closed for conn in opened)
        assert opened[0].executed == [("UPDATE t SET a=$1 WHERE id=$2;", ("x", 1))]
        assert dsns == ["postgresql://u:p@db/app"] * 2

    @pytest.mark.asyncio
    async def test_execute_query_returns_rows(self, connections):
        rows = [{"id": 1, "name": "Ann", "age": 30}]
        opened, _ = connections(rows=rows)

        result = await DatabaseOperations().execute_query("SELECT id,name,age FROM public.users", [])

        assert result == rows
        assert opened[0].closed

    @pytest.mark.asyncio
    async def test_statement_failure_is_wrapped_and_connection_closed(self, connections):
        cause = RuntimeError('relation "public.users" does not exist')
        opened, _ = connections(error=cause)

        with pytest.raises(ExecutionFailure) as exc_info:
            await DatabaseOperations().execute_query("SELECT id FROM public.users WHERE id=$1", [5])

        assert exc_info.value.query == "SELECT id FROM public.users WHERE id=$1"
        assert exc_info.value.params == [5]
        assert exc_info.value.__cause__ is cause
        assert opened[0].closed

    @pytest.mark.asyncio
    async def test_failure_message_leaves_out_params(self, connections):
        connections(error=RuntimeError("duplicate key"))

        with pytest.raises(ExecutionFailure) as exc_info:
            await DatabaseOperations().execute_update(
                "UPDATE accounts SET password=$1 WHERE id=$2;", ["hunter2", 1]
            )

        assert exc_info.value.params == ["hunter2", 1]
        assert "hunter2" not in str(exc_info.value)
        assert "UPDATE accounts SET password=$1" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_connect_failure_is_wrapped(self, monkeypatch):
        async def refuse(dsn):
            raise OSError("connection refused")

        monkeypatch.setattr("asyncpg.connect", refuse)

        with pytest.raises(ExecutionFailure, match="DELETE FROM t") as exc_info:
            await DatabaseOperations().execute_update("DELETE FROM t WHERE id=1;", [])
        assert isinstance(exc_info.value.__cause__, OSError)

    @pytest.mark.asyncio
    async def test_statements_are_tracked(self, connections):
        connections(status="INSERT 0 1")
        ops = DatabaseOperations()

        async with track_queries() as tracker:
            await ops.execute_update("INSERT INTO t (a) VALUES($1);", ["x"])

        assert tracker.count() == 1
        log = tracker.get_queries()[0]
        assert log.query == "INSERT INTO t (a) VALUES($1);"
        assert log.params == ["x"]
        assert "test_statements_are_tracked" in log.stack_trace
