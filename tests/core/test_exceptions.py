"""Tests for the clientsync exception hierarchy."""

from __future__ import annotations

from clientsync import (
    ClientSyncError,
    ConfigError,
    CorrectionError,
    PersistenceError,
    ServerError,
    ServerResponseError,
    SyncError,
    TransportError,
)


class TestExceptionHierarchy:
    def test_all_exceptions_inherit_from_client_sync_error(self) -> None:
        for exc_type in (ConfigError, ServerError, CorrectionError, PersistenceError, SyncError):
            assert issubclass(exc_type, ClientSyncError)

    def test_server_errors_share_a_base(self) -> None:
        assert issubclass(TransportError, ServerError)
        assert issubclass(ServerResponseError, ServerError)

    def test_server_response_error_keeps_status_code(self) -> None:
        assert ServerResponseError("bad", status_code=503).status_code == 503
        assert ServerResponseError("bad").status_code is None

    def test_correction_error_keeps_record_id(self) -> None:
        exc = CorrectionError("failed", record_id="65f0")
        assert exc.record_id == "65f0"
        assert str(exc) == "failed"
