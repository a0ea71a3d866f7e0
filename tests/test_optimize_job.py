"""Tests for the batch command line tool."""

import json
from unittest import mock

import ezdxf
import pytest

from freecut.tools import optimize_job


@pytest.fixture
def job_file(tmp_path, job_dict):
    path = tmp_path / "job.json"
    path.write_text(json.dumps(job_dict), encoding="utf-8")
    return path


def test_prints_report_without_outputs(job_file, capsys):
    assert optimize_job.main([str(job_file)]) == 0
    out = capsys.readouterr().out
    assert "Average Utilization: 24.00%" in out


def test_writes_requested_outputs(job_file, tmp_path, capsys):
    report = tmp_path / "report.txt"
    dxf = tmp_path / "layout.dxf"
    result_json = tmp_path / "result.json"

    code = optimize_job.main([str(job_file), "--report", str(report), "--dxf", str(dxf),
                              "--json", str(result_json)])
    assert code == 0
    assert "Pieces: 2" in report.read_text(encoding="utf-8")
    assert len(ezdxf.readfile(str(dxf)).modelspace().query("LINE")) == 8
    assert json.loads(result_json.read_text(encoding="utf-8"))["cutsPlaced"] == 2
    assert capsys.readouterr().out == ""


def test_command_line_overrides_job_params(job_file):
    stock, cuts, params = optimize_job.load_job(str(job_file), kerf=5, grid_step=2)
    assert (params.kerf, params.grid_step) == (5, 2)
    assert [cut.id for cut in cuts] == ["door"]


def test_missing_file_exits_with_error(tmp_path):
    assert optimize_job.main([str(tmp_path / "nope.json")]) == 1


def test_invalid_job_exits_with_error(tmp_path):
    path = tmp_path / "job.json"
    path.write_text(json.dumps({"stock": [{"width": 10}], "cuts": []}), encoding="utf-8")
    assert optimize_job.main([str(path)]) == 1


@pytest.mark.parametrize("cuts", [
    [{"width": 400, "height": 300, "quantity": -3}],
    [{"width": -50, "height": 100, "quantity": 1}],
])
def test_negative_values_exit_with_error(tmp_path, job_dict, cuts, capsys):
    job_dict["cuts"] = cuts
    path = tmp_path / "job.json"
    path.write_text(json.dumps(job_dict), encoding="utf-8")
    assert optimize_job.main([str(path)]) == 1
    assert capsys.readouterr().out == ""


def test_non_positive_grid_step_exits_with_error(job_file):
    assert optimize_job.main([str(job_file), "--grid-step", "0"]) == 1


@pytest.fixture
def reachable_service():
    with mock.patch.object(optimize_job.api_client, "check_api_connection", return_value=True) as check:
        yield check


def test_unreachable_service_exits_before_optimizing(job_file):
    with mock.patch.object(optimize_job.api_client, "check_api_connection", return_value=False), \
            mock.patch.object(optimize_job.api_client, "optimize_remote") as remote:
        assert optimize_job.main([str(job_file), "--remote"]) == 1
    remote.assert_not_called()


def test_remote_failure_exits_with_error(job_file, reachable_service):
    with mock.patch.object(optimize_job.api_client, "optimize_remote", return_value=None):
        assert optimize_job.main([str(job_file), "--remote"]) == 1


def test_remote_result_is_reported(job_file, basic_result, capsys, reachable_service):
    with mock.patch.object(optimize_job.api_client, "optimize_remote", return_value=basic_result) as remote:
        assert optimize_job.main([str(job_file), "--remote"]) == 0
    assert remote.called
    assert reachable_service.called
    assert "Total Waste: 760000.00 units²" in capsys.readouterr().out
