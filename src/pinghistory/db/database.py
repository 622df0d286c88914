import time
from typing import Optional

import pymysql
from pymysql.connections import Connection

from ..config import Settings
from ..errors import HistoryWriteError, SchemaInitError, SchemaInitTimeout
from ..logger import get_logger

logger = get_logger(__name__)

HISTORY_TABLE = "history"

# Upper bound for the whole schema initialization (connect + both DDL statements)
INIT_DEADLINE_S = 5.0


def quote_ident(name: str) -> str:
    """
    Quote a MySQL identifier with backticks.
    """
    return "`" + name.replace("`", "``") + "`"


def schema_statements(database: str) -> tuple[str, str]:
    """
    DDL that creates the database and the history table if they are missing.

    Args:
        database (str): Database name.

    Returns:
        tuple[str, str]: CREATE DATABASE and CREATE TABLE statements, in order.
    """
    db = quote_ident(database)
    return (
        f"CREATE DATABASE IF NOT EXISTS {db};",
        f"CREATE TABLE IF NOT EXISTS {db}.{quote_ident(HISTORY_TABLE)} (message CHAR(255));",
    )


def get_db_connection(
    settings: Settings, use_database: bool = True, timeout: Optional[float] = None
) -> Connection:
    """
    Establishes a connection to the MySQL server.

    Args:
        settings (Settings): Connection parameters.
        use_database (bool): If False, no database is selected (server scope),
                             which is what DDL creating the database needs.
        timeout (Optional[float]): Connect/read/write timeout in seconds.
                                   If None, the driver defaults apply.

    Returns:
        Connection: Open PyMySQL connection. The caller must close it.

    Raises:
        pymysql.MySQLError: If the server cannot be reached or rejects the login.
    """
    kwargs = settings.connect_kwargs(use_database)
    if timeout is not None:
        kwargs.update(connect_timeout=timeout, read_timeout=timeout, write_timeout=timeout)
    return pymysql.connect(**kwargs)


def _remaining(deadline: float, deadline_s: float) -> float:
    """
    Seconds left before `deadline`; raises SchemaInitTimeout once it has passed.
    """
    left = deadline - time.monotonic()
    if left <= 0:
        raise SchemaInitTimeout(deadline_s)
    return left


def _execute_ddl(settings: Settings, statement: str, deadline: float, deadline_s: float) -> None:
    # PyMySQL timeouts are fixed at connect time, so each statement gets a
    # connection bounded by what is left of the budget.
    try:
        conn = get_db_connection(
            settings, use_database=False, timeout=_remaining(deadline, deadline_s)
        )
    except pymysql.MySQLError as e:
        if time.monotonic() >= deadline:
            raise SchemaInitTimeout(deadline_s) from e
        raise SchemaInitError(f"Cannot connect to {settings.dsn(False, redact=True)}: {e}") from e

    try:
        with conn.cursor() as cur:
            cur.execute(statement)
        conn.commit()
    except pymysql.MySQLError as e:
        if time.monotonic() >= deadline:
            raise SchemaInitTimeout(deadline_s) from e
        raise SchemaInitError(f"Schema initialization failed: {e}") from e
    finally:
        conn.close()

    if time.monotonic() >= deadline:
        raise SchemaInitTimeout(deadline_s)


def initialize_database(settings: Settings, deadline_s: float = INIT_DEADLINE_S) -> None:
    """
    Creates the database and the history table if they do not exist.

    Safe to call multiple times. Any failure is fatal for the caller. Every
    statement runs on a server-scoped connection whose connect/read/write
    timeouts are the remaining share of `deadline_s`; connections are closed
    on every path.

    Args:
        settings (Settings): Connection parameters.
        deadline_s (float): Time budget for the whole initialization.

    Raises:
        SchemaInitTimeout: If the deadline is exceeded, including after the last statement.
        SchemaInitError: If connecting or executing the DDL fails.
    """
    deadline = time.monotonic() + deadline_s
    logger.info("Initializing schema via %s", settings.dsn(use_database=False, redact=True))

    for statement in schema_statements(settings.database):
        _execute_ddl(settings, statement, deadline, deadline_s)

    logger.info("Schema ready: %s.%s", settings.database, HISTORY_TABLE)


def insert_message(conn: Connection, database: str, message: str) -> None:
    """
    Appends one message to the history table and commits.

    Args:
        conn (Connection): Open connection scoped to `database`.
        database (str): Database holding the history table.
        message (str): Value to store.

    Raises:
        HistoryWriteError: If preparing, executing or committing the insert fails.
    """
    sql = f"INSERT INTO {quote_ident(database)}.{quote_ident(HISTORY_TABLE)} (message) VALUES (%s);"
    try:
        with conn.cursor() as cur:
            cur.execute(sql, (message,))
        conn.commit()
    except pymysql.MySQLError as e:
        raise HistoryWriteError(message, e) from e
