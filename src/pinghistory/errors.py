from __future__ import annotations


class PingHistoryError(RuntimeError):
    """
    Base class for errors raised by pinghistory.
    """


class ConfigError(PingHistoryError):
    """
    Raised when the environment holds an unusable configuration value.
    """


class SchemaInitError(PingHistoryError):
    """
    Raised when the database or the history table cannot be created at startup.

    Always fatal: the service must not start serving requests without a schema.
    """


class SchemaInitTimeout(SchemaInitError):
    """
    Raised when schema initialization runs past its deadline.
    """

    def __init__(self, deadline_s: float) -> None:
        super().__init__(f"Schema initialization exceeded {deadline_s:g}s deadline")
        self.deadline_s = deadline_s


class HistoryWriteError(PingHistoryError):
    """
    Raised when a message cannot be written to the history table.

    Recoverable at the request boundary: the app maps it to a 500 response.
    """

    def __init__(self, message: str, cause: BaseException) -> None:
        super().__init__(f"Failed to insert {message!r}: {cause}")
        self.message = message
        self.cause = cause
