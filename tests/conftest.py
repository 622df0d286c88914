import sys
from pathlib import Path

import pymysql
import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, sql, args=None):
        server = self.conn.server
        if self.conn.closed:
            raise pymysql.err.InterfaceError(0, "closed")
        server.statements.append((sql, args))
        if server.fail_execute is not None:
            raise server.fail_execute
        if sql.startswith("INSERT"):
            self.conn.pending.append(args[0])
        return 1


class FakeConnection:
    def __init__(self, server, kwargs):
        self.server = server
        self.kwargs = kwargs
        self.pending = []
        self.commits = 0
        self.closed = False

    def cursor(self):
        return FakeCursor(self)

    def commit(self):
        if self.server.fail_commit is not None:
            raise self.server.fail_commit
        self.server.rows.extend(self.pending)
        self.pending = []
        self.commits += 1

    def close(self):
        self.closed = True


class FakeMySQL:
    """
    In-memory stand-in for a MySQL server reached through pymysql.connect().
    """

    def __init__(self):
        self.connections = []
        self.statements = []
        self.rows = []
        self.fail_connect = None
        self.fail_execute = None
        self.fail_commit = None

    def connect(self, **kwargs):
        if self.fail_connect is not None:
            raise self.fail_connect
        conn = FakeConnection(self, kwargs)
        self.connections.append(conn)
        return conn

    @property
    def ddl(self):
        return [sql for sql, _ in self.statements if sql.startswith("CREATE")]


@pytest.fixture
def fake_mysql(monkeypatch):
    server = FakeMySQL()
    monkeypatch.setattr(pymysql, "connect", server.connect)
    return server


@pytest.fixture
def clean_env(monkeypatch):
    """
    Remove service variables from the environment and skip .env loading.
    """
    for key in (
        "MYSQL_DRIVER",
        "MYSQL_USER",
        "MYSQL_PASSWORD",
        "MYSQL_DATABASE",
        "MYSQL_HOST",
        "MYSQL_PORT",
        "PING_HOST",
        "PING_PORT",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr("pinghistory.config.load_dotenv", lambda *a, **k: False)
    return monkeypatch
