from unittest.mock import MagicMock, patch

import httpx
import pytest

from git_wrapped.utils.retry import call_with_retry


def test_returns_first_success_without_sleeping():
    fn = MagicMock(return_value="ok")
    with patch("git_wrapped.utils.retry.time.sleep") as sleep:
        assert call_with_retry(fn, 1, key="v") == "ok"
    fn.assert_called_once_with(1, key="v")
    sleep.assert_not_called()


def test_retries_transport_errors_with_backoff():
    fn = MagicMock(side_effect=[httpx.ConnectError("boom"), httpx.ReadTimeout("slow"), "ok"])
    with patch("git_wrapped.utils.retry.time.sleep") as sleep:
        assert call_with_retry(fn) == "ok"
    assert [c.args[0] for c in sleep.call_args_list] == [5, 10]


def test_other_errors_are_not_retried():
    fn = MagicMock(side_effect=ValueError("bad"))
    with patch("git_wrapped.utils.retry.time.sleep") as sleep:
        with pytest.raises(ValueError):
            call_with_retry(fn)
    sleep.assert_not_called()
    assert fn.call_count == 1


def test_gives_up_after_max_retries():
    fn = MagicMock(side_effect=httpx.ConnectError("down"))
    with patch("git_wrapped.utils.retry.time.sleep"):
        with pytest.raises(httpx.ConnectError):
            call_with_retry(fn, max_retries=2)
    assert fn.call_count == 2
