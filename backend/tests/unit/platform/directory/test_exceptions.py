"""Unit tests for directory error classification and administrator messages."""

import socket

import pytest
from ldap3.core.exceptions import LDAPSocketOpenError

from dirsync.platform.directory.exceptions import (
    AuthenticationFailureKind,
    ConnectionFailureKind,
    DirectoryAuthenticationError,
    DirectoryConnectionError,
    DirectorySearchError,
    DirectorySizeLimitExceeded,
    DirectoryWatchdogTimeout,
    classify_bind_failure,
    classify_connection_failure,
)


def _wrapped(cause: BaseException, text: str = "socket connection error") -> Exception:
    error = LDAPSocketOpenError(text)
    error.__cause__ = cause
    return error


class TestClassifyConnectionFailure:
    @pytest.mark.parametrize(
        "exc, expected",
        [
            (socket.gaierror(-2, "Name or service not known"), ConnectionFailureKind.HOST_NOT_FOUND),
            (ConnectionResetError(104, "Connection reset by peer"), ConnectionFailureKind.RESET),
            (ConnectionRefusedError(111, "Connection refused"), ConnectionFailureKind.REFUSED_OR_TIMED_OUT),
            (TimeoutError("timed out"), ConnectionFailureKind.REFUSED_OR_TIMED_OUT),
        ],
    )
    def test_typed_errors(self, exc, expected):
        assert classify_connection_failure(exc) is expected

    def test_typed_error_in_cause_chain(self):
        assert (
            classify_connection_failure(_wrapped(socket.gaierror(-2, "unknown")))
            is ConnectionFailureKind.HOST_NOT_FOUND
        )

    def test_typed_error_in_args(self):
        error = LDAPSocketOpenError("unable to open socket", ConnectionResetError(104, "x"))
        assert classify_connection_failure(error) is ConnectionFailureKind.RESET

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("getaddrinfo ENOTFOUND dc01", ConnectionFailureKind.HOST_NOT_FOUND),
            ("[Errno 104] Connection reset by peer", ConnectionFailureKind.RESET),
            ("socket connection error: [Errno 111] Connection refused", ConnectionFailureKind.REFUSED_OR_TIMED_OUT),
            ("connect ETIMEDOUT 10.0.0.1:389", ConnectionFailureKind.REFUSED_OR_TIMED_OUT),
            ("something unexpected", ConnectionFailureKind.OTHER),
        ],
    )
    def test_message_markers(self, text, expected):
        assert classify_connection_failure(LDAPSocketOpenError(text)) is expected


class TestClassifyBindFailure:
    def test_invalid_credentials_code(self):
        assert classify_bind_failure(49) is AuthenticationFailureKind.INVALID_CREDENTIALS

    def test_invalid_credentials_text(self):
        assert (
            classify_bind_failure(message="LDAPInvalidCredentialsResult - 49 - invalidCredentials")
            is AuthenticationFailureKind.INVALID_CREDENTIALS
        )

    def test_timeout_text(self):
        assert classify_bind_failure(message="operation timed out") is AuthenticationFailureKind.TIMEOUT

    def test_other(self):
        assert classify_bind_failure(53, "unwillingToPerform") is AuthenticationFailureKind.OTHER


class TestUserMessages:
    def test_connection_messages(self):
        def message(kind):
            return DirectoryConnectionError("boom", kind, host="dc01", port=636).user_message

        assert message(ConnectionFailureKind.HOST_NOT_FOUND) == "Server not found. Check address: dc01"
        assert message(ConnectionFailureKind.REFUSED_OR_TIMED_OUT) == (
            "Server unavailable. Check address and port: dc01:636"
        )
        assert message(ConnectionFailureKind.RESET) == (
            "Connection reset. Try using a different port (636 for SSL)"
        )
        assert message(ConnectionFailureKind.OTHER) == "Connection error: boom"

    def test_authentication_messages(self):
        assert DirectoryAuthenticationError(
            "x", AuthenticationFailureKind.TIMEOUT
        ).user_message == "Timeout exceeded. Check server address and port"
        assert DirectoryAuthenticationError("strongAuthRequired").user_message == (
            "Authentication error: strongAuthRequired"
        )

    def test_search_errors(self):
        assert DirectorySearchError("busy").user_message == "Error getting results: busy"
        assert DirectorySearchError("busy").soft is False
        limit = DirectorySizeLimitExceeded()
        assert limit.soft is True
        assert limit.result_code == 4

    def test_watchdog_message(self):
        assert DirectoryWatchdogTimeout(30).user_message == (
            "Connection timeout (30 sec). Check server address and port availability."
        )
