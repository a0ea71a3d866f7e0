"""Tests for the requests-based API client; HTTP calls are patched."""

from unittest import mock

import pytest
import requests

from freecut.core import api_client
from freecut.core.optimizer_core import OptimizationParams, RotationMode


def _response(json_data=None, text="", status_code=200):
    response = mock.Mock()
    response.status_code = status_code
    response.json.return_value = json_data
    response.text = text
    response.raise_for_status.return_value = None
    return response


def test_check_api_connection_ok():
    with mock.patch.object(api_client.requests, "get", return_value=_response({"status": "ok"})) as get:
        assert api_client.check_api_connection()
    assert get.call_args[0][0].endswith("/health")


def test_check_api_connection_refused():
    with mock.patch.object(api_client.requests, "get", side_effect=requests.exceptions.ConnectionError()):
        assert not api_client.check_api_connection()


def test_build_job_payload(square_stock, two_rectangles):
    params = OptimizationParams(kerf=4, grid_step=5, rotation_mode=RotationMode.NONE)
    payload = api_client.build_job_payload([square_stock], [two_rectangles], params)
    assert payload["kerf"] == 4
    assert payload["grid_step"] == 5
    assert payload["allow_rotation"] is False
    assert payload["stock"][0]["id"] == "stock_1"
    assert payload["cuts"][0]["quantity"] == 2


def test_optimize_remote_parses_result(square_stock, two_rectangles, basic_result):
    response = _response(basic_result.to_dict())
    with mock.patch.object(api_client.requests, "post", return_value=response) as post:
        result = api_client.optimize_remote([square_stock], [two_rectangles])

    assert result == basic_result
    url = post.call_args[0][0]
    assert url.endswith("/optimize")
    assert post.call_args[1]["json"]["cuts"][0]["id"] == "cut_1"


@pytest.mark.parametrize("error", [
    requests.exceptions.Timeout(),
    requests.exceptions.ConnectionError(),
    requests.exceptions.HTTPError("500 Server Error"),
])
def test_optimize_remote_returns_none_on_transport_errors(square_stock, two_rectangles, error):
    with mock.patch.object(api_client.requests, "post", side_effect=error):
        assert api_client.optimize_remote([square_stock], [two_rectangles]) is None


def test_api_request_bad_json_returns_none():
    response = _response()
    response.json.side_effect = ValueError("not json")
    with mock.patch.object(api_client.requests, "get", return_value=response):
        assert api_client.api_request("health") is None


def test_get_report_remote_returns_text(square_stock, two_rectangles):
    response = _response(text="FreeCut Optimization Report\n")
    with mock.patch.object(api_client.requests, "post", return_value=response) as post:
        report = api_client.get_report_remote([square_stock], [two_rectangles])

    assert report.startswith("FreeCut Optimization Report")
    assert post.call_args[0][0].endswith("/export/report")
    response.json.assert_not_called()


def test_get_dxf_remote_returns_text(square_stock, two_rectangles):
    response = _response(text="0\nSECTION\n")
    with mock.patch.object(api_client.requests, "post", return_value=response) as post:
        assert api_client.get_dxf_remote([square_stock], [two_rectangles]) == "0\nSECTION\n"
    assert post.call_args[0][0].endswith("/export/dxf")


def test_client_waits_longer_than_service_timeout():
    from freecut.core.config import API_TIMEOUT
    from freecut_api.config import API_TIMEOUT as SERVICE_TIMEOUT
    assert API_TIMEOUT > SERVICE_TIMEOUT


def test_health_check_uses_short_timeout():
    with mock.patch.object(api_client.requests, "get", return_value=_response({"status": "ok"})) as get:
        api_client.check_api_connection()
    assert get.call_args[1]["timeout"] == api_client.HEALTH_TIMEOUT
