from .requests import CONFIRMATION_PREFIX, PingApiError, PingClient, quick_smoke_test

__all__ = [
    "CONFIRMATION_PREFIX",
    "PingApiError",
    "PingClient",
    "quick_smoke_test",
]
