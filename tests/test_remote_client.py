from unittest.mock import MagicMock, patch

import requests

from seatmap.remote_client import fetch_snapshot, push_snapshot


@patch("seatmap.remote_client.requests.put")
def test_push_snapshot(mock_put):
    mock_put.return_value = MagicMock(status_code=200)

    assert push_snapshot("http://store/cinema", '{"a": 1}', timeout=1)

    mock_put.assert_called_once()
    args, kwargs = mock_put.call_args
    assert args == ("http://store/cinema",)
    assert kwargs["data"] == b'{"a": 1}'
    assert kwargs["timeout"] == 1


@patch("seatmap.remote_client.requests.put")
def test_push_snapshot_failure_is_reported(mock_put):
    mock_put.side_effect = requests.ConnectionError("down")
    assert push_snapshot("http://store/cinema", "{}") is False


@patch("seatmap.remote_client.requests.get")
def test_fetch_snapshot(mock_get):
    mock_get.return_value = MagicMock(text='{"b": 2}')
    assert fetch_snapshot("http://store/cinema") == '{"b": 2}'

    mock_get.return_value.raise_for_status.side_effect = requests.HTTPError("404")
    assert fetch_snapshot("http://store/cinema") is None
