from __future__ import annotations

import pymysql
import pytest
from fastapi.testclient import TestClient

from pinghistory.config import Settings
from pinghistory.db.app import create_app
from pinghistory.errors import SchemaInitError


@pytest.fixture
def client(fake_mysql):
    with TestClient(create_app(Settings())) as c:
        yield c


def test_startup_initializes_schema(client, fake_mysql):
    assert len(fake_mysql.ddl) == 2
    assert fake_mysql.connections[0].closed


def test_get_hello_records_and_echoes(client, fake_mysql):
    resp = client.get("/hello")

    assert resp.status_code == 200
    assert resp.text == "Value inserted: hello\n"
    assert resp.headers["content-type"].startswith("text/plain")
    assert fake_mysql.rows == ["hello"]

    request_conn = fake_mysql.connections[-1]
    assert request_conn.kwargs["database"] == "ping"
    assert request_conn.closed


def test_root_path_records_empty_message(client, fake_mysql):
    resp = client.get("/")

    assert resp.text == "Value inserted: \n"
    assert fake_mysql.rows == [""]


def test_nested_path_and_query_string(client, fake_mysql):
    resp = client.get("/a/b/c?ignored=1")

    assert resp.text == "Value inserted: a/b/c\n"
    assert fake_mysql.rows == ["a/b/c"]


def test_percent_encoded_path_is_decoded(client, fake_mysql):
    resp = client.get("/hello%20world")

    assert resp.text == "Value inserted: hello world\n"
    assert fake_mysql.rows == ["hello world"]


@pytest.mark.parametrize(
    "method", ["POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE", "PROPFIND", "FOO"]
)
def test_any_method_is_recorded(client, fake_mysql, method):
    resp = client.request(method, "/ping")

    assert resp.status_code == 200
    assert resp.text == "Value inserted: ping\n"
    assert fake_mysql.rows == ["ping"]


@pytest.mark.parametrize("path", ["docs", "redoc", "openapi.json"])
def test_framework_doc_paths_are_recorded_too(client, fake_mysql, path):
    resp = client.get(f"/{path}")

    assert resp.status_code == 200
    assert resp.text == f"Value inserted: {path}\n"
    assert fake_mysql.rows == [path]


def test_head_is_recorded(client, fake_mysql):
    resp = client.head("/ping")

    assert resp.status_code == 200
    assert fake_mysql.rows == ["ping"]


def test_duplicates_are_kept(client, fake_mysql):
    client.get("/same")
    client.get("/same")

    assert fake_mysql.rows == ["same", "same"]


def test_path_of_255_chars_is_accepted(client, fake_mysql):
    path = "x" * 255

    resp = client.get(f"/{path}")

    assert resp.status_code == 200
    assert fake_mysql.rows == [path]


def test_path_of_256_chars_is_rejected_without_touching_db(client, fake_mysql):
    opened = len(fake_mysql.connections)

    resp = client.get("/" + "x" * 256)

    assert resp.status_code == 400
    assert "255" in resp.text
    assert fake_mysql.rows == []
    assert len(fake_mysql.connections) == opened


def test_insert_failure_returns_500_and_server_keeps_serving(client, fake_mysql):
    fake_mysql.fail_execute = pymysql.err.IntegrityError(1062, "Duplicate entry")

    resp = client.get("/hello")

    assert resp.status_code == 500
    assert resp.text == "Failed to insert value: hello\n"
    assert fake_mysql.connections[-1].closed

    fake_mysql.fail_execute = None
    resp = client.get("/again")
    assert resp.status_code == 200
    assert fake_mysql.rows == ["again"]


def test_connection_failure_per_request_returns_500(client, fake_mysql):
    fake_mysql.fail_connect = pymysql.err.OperationalError(2003, "Can't connect")

    resp = client.get("/hello")

    assert resp.status_code == 500
    assert resp.text == "Failed to insert value: hello\n"


def test_startup_failure_is_raised(fake_mysql):
    fake_mysql.fail_connect = pymysql.err.OperationalError(2003, "Can't connect")

    with pytest.raises(SchemaInitError):
        with TestClient(create_app(Settings())):
            pass


def test_settings_resolved_from_env_at_startup(fake_mysql, clean_env):
    clean_env.setenv("MYSQL_DATABASE", "pings")

    with TestClient(create_app()) as c:
        resp = c.get("/hi")

    assert resp.status_code == 200
    assert "CREATE DATABASE IF NOT EXISTS `pings`;" in fake_mysql.ddl
    sql, args = fake_mysql.statements[-1]
    assert sql.startswith("INSERT INTO `pings`.`history`")
    assert args == ("hi",)
