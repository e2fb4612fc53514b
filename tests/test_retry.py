"""
tests/test_retry.py
Retry policy: exponential backoff, retry limits, transient error classification.
"""

import pytest
from postgrest.exceptions import APIError

from app.core.retry import RetryPolicy, is_transient_error, is_transient_read_error


def _api_error(code: str, message: str = "upstream failure") -> APIError:
    return APIError({"code": code, "message": message})


class Flaky:
    def __init__(self, failures, result="ok"):
        self.failures = list(failures)
        self.calls = 0
        self.result = result

    def __call__(self):
        self.calls += 1
        if self.failures:
            raise self.failures.pop(0)
        return self.result


def test_backoff_delays_double_each_attempt(no_wait_policy):
    fn = Flaky([_api_error("40001")] * 3)
    assert no_wait_policy.call(fn) == "ok"
    assert fn.calls == 4
    assert no_wait_policy.delays == [1.0, 2.0, 4.0]


def test_gives_up_after_max_retries(no_wait_policy):
    fn = Flaky([_api_error("PGRST301")] * 5)
    with pytest.raises(APIError):
        no_wait_policy.call(fn)
    # one initial call plus three retries
    assert fn.calls == 4
    assert len(no_wait_policy.delays) == 3


def test_non_transient_error_is_not_retried(no_wait_policy):
    fn = Flaky([_api_error("23505", "duplicate key value")])
    with pytest.raises(APIError):
        no_wait_policy.call(fn)
    assert fn.calls == 1
    assert no_wait_policy.delays == []


def test_with_predicate_keeps_timing():
    delays = []
    policy = RetryPolicy(max_retries=2, base_delay=0.5, sleep=delays.append)
    read_policy = policy.with_predicate(is_transient_read_error)
    fn = Flaky([_api_error("PGRST116")] * 2)
    assert read_policy.call(fn) == "ok"
    assert delays == [0.5, 1.0]


def test_classification():
    assert is_transient_error(_api_error("PGRST301"))
    assert is_transient_error(_api_error("40001"))
    assert is_transient_error(Exception("Connection reset by peer"))
    assert not is_transient_error(_api_error("PGRST116"))
    assert not is_transient_error(Exception("network unreachable"))

    assert is_transient_read_error(_api_error("PGRST116"))
    assert is_transient_read_error(Exception("network unreachable"))
    assert is_transient_read_error(Exception("read timeout"))
    assert not is_transient_read_error(_api_error("23505", "duplicate key value"))
