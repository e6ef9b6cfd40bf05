"""Tests for userssh.ssh.result — outcome classification."""

from userssh.ssh.result import (
    NO_OUTPUT_MESSAGE,
    ExecutionResult,
    FailureKind,
    classify,
)
from userssh.ssh.transport import TransportError, TransportErrorKind, TransportOutcome

HOST_KEY_WARNING = (
    "Warning: Permanently added '10.0.0.5' (ED25519) to the list of known hosts."
)


class TestExecutionResult:
    def test_defaults_are_success(self):
        r = ExecutionResult()
        assert r.ok is True
        assert r.output == ""

    def test_failure(self):
        r = ExecutionResult(kind=FailureKind.TIMEOUT, error="x")
        assert r.ok is False


class TestClassifySuccess:
    def test_stdout(self):
        result = classify(TransportOutcome(stdout="hi\n"))
        assert result.ok
        assert result.output == "hi\n"

    def test_empty_stdout_is_sentinel(self):
        result = classify(TransportOutcome(stdout=""))
        assert result.ok
        assert result.output == NO_OUTPUT_MESSAGE

    def test_host_key_warning_ignored(self):
        result = classify(TransportOutcome(stdout="ok\n", stderr=HOST_KEY_WARNING + "\r\n"))
        assert result.ok
        assert result.output == "ok\n"


class TestClassifyFailure:
    def test_stderr_is_remote_error(self):
        result = classify(TransportOutcome(stdout="", stderr="ls: cannot access 'x'\n"))
        assert result.kind is FailureKind.REMOTE_ERROR
        assert result.error == "SSH error: ls: cannot access 'x'"

    def test_stderr_with_exit_zero_still_error(self):
        result = classify(TransportOutcome(stdout="partial", stderr="boom", returncode=0))
        assert result.kind is FailureKind.REMOTE_ERROR
        assert result.output == ""

    def test_warning_plus_real_error(self):
        stderr = f"{HOST_KEY_WARNING}\nPermission denied, please try again.\n"
        result = classify(TransportOutcome(stderr=stderr, returncode=5))
        assert result.kind is FailureKind.REMOTE_ERROR
        assert result.error == "SSH error: Permission denied, please try again."

    def test_nonzero_exit_without_stderr(self):
        result = classify(TransportOutcome(stdout="", stderr="", returncode=2))
        assert result.kind is FailureKind.REMOTE_ERROR
        assert result.error == "SSH error: exited with status 2"

    def test_nonzero_exit_only_host_key_warning(self):
        result = classify(TransportOutcome(stderr=HOST_KEY_WARNING, returncode=1))
        assert result.error == "SSH error: exited with status 1"

    def test_timeout(self):
        result = classify(TransportError(TransportErrorKind.TIMEOUT))
        assert result.kind is FailureKind.TIMEOUT
        assert result.error == "SSH connection timed out"

    def test_unknown(self):
        result = classify(TransportError(TransportErrorKind.UNKNOWN, "Broken pipe"))
        assert result.kind is FailureKind.TRANSPORT_UNKNOWN
        assert result.error == "SSH error: Broken pipe"
