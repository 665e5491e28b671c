"""Tests for the command line interface."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from timeflow.cli import main
from timeflow.config import Config


@pytest.fixture
def runner(tmp_path):
    """CliRunner with config pointing at a temporary data directory."""
    config = Config(data_dir=str(tmp_path / "data"))
    with patch("timeflow.cli.load_config", return_value=config):
        yield CliRunner()


def _add(runner, *extra):
    return runner.invoke(
        main, ["add", "-r", "WV01", "-t", "2024-01-01T09:00:00Z", "--type", "fsv", *extra]
    )


def _ids(runner):
    result = runner.invoke(main, ["list", "--json"])
    return [a["id"] for a in json.loads(result.output)]


class TestActivities:
    def test_add_and_list(self, runner):
        result = _add(runner, "-n", "Pass 12")
        assert result.exit_code == 0
        assert "Pass 12" in result.output

        listed = json.loads(runner.invoke(main, ["list", "--json"]).output)
        assert len(listed) == 1
        assert listed[0]["resource"] == "WV01"
        assert listed[0]["coreTime"] == "2024-01-01T09:00:00.000Z"
        assert listed[0]["preActionDuration"] == 5

    def test_list_text(self, runner):
        _add(runner)
        result = runner.invoke(main, ["list"])
        assert result.exit_code == 0
        assert "08:55-09:03Z" in result.output
        assert "FSV - WV01" in result.output

    def test_list_empty(self, runner):
        assert "No activities." in runner.invoke(main, ["list"]).output

    def test_add_several(self, runner):
        result = runner.invoke(
            main,
            [
                "add", "-r", "WV01", "-r", "WV02",
                "-t", "2024-01-01T09:00:00Z", "-t", "2024-01-01T15:00:00Z",
                "--type", "tl",
            ],
        )
        assert result.exit_code == 0
        assert result.output.count("Added ") == 4
        assert len(_ids(runner)) == 4

    def test_add_several_with_bad_time_adds_none(self, runner):
        result = runner.invoke(
            main, ["add", "-r", "WV01", "-t", "2024-01-01T09:00:00Z", "-t", "later", "--type", "fsv"]
        )
        assert result.exit_code == 1
        assert _ids(runner) == []

    def test_add_unknown_resource(self, runner):
        result = runner.invoke(
            main, ["add", "-r", "BADSAT", "-t", "2024-01-01T09:00:00Z", "--type", "fsv"]
        )
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_add_unknown_type(self, runner):
        result = runner.invoke(
            main, ["add", "-r", "WV01", "-t", "2024-01-01T09:00:00Z", "--type", "warp"]
        )
        assert result.exit_code == 1
        assert "warp" in result.output

    def test_complete_and_delete(self, runner):
        _add(runner)
        activity_id = _ids(runner)[0]

        result = runner.invoke(main, ["complete", activity_id])
        assert "completed" in result.output

        result = runner.invoke(main, ["delete", activity_id])
        assert result.exit_code == 0
        assert _ids(runner) == []

    def test_edit(self, runner):
        _add(runner)
        activity_id = _ids(runner)[0]
        result = runner.invoke(main, ["edit", activity_id, "--post", "12"])
        assert result.exit_code == 0
        listed = json.loads(runner.invoke(main, ["list", "--json"]).output)
        assert listed[0]["postActionDuration"] == 12

    def test_unknown_id(self, runner):
        result = runner.invoke(main, ["delete", "nope"])
        assert result.exit_code == 1
        assert "No activity nope" in result.output

    def test_clear(self, runner):
        _add(runner)
        _add(runner)
        result = runner.invoke(main, ["clear", "--yes"])
        assert "Deleted 2 activities." in result.output
        assert _ids(runner) == []


class TestCsv:
    def test_import_clean(self, runner, tmp_path):
        path = tmp_path / "in.csv"
        path.write_text("resource,coreTime,type\nWV01,09:00,fsv\nLG02,10:30,rtp\n")
        result = runner.invoke(main, ["import", str(path), "--time-only", "--date", "2024-01-01"])
        assert result.exit_code == 0
        assert "Imported 2 activities." in result.output
        assert len(_ids(runner)) == 2

    def test_import_rejected(self, runner, tmp_path):
        path = tmp_path / "in.csv"
        path.write_text("resource,coreTime,type\nBADSAT,09:00,fsv\n")
        result = runner.invoke(main, ["import", str(path), "--time-only", "--date", "2024-01-01"])
        assert result.exit_code == 1
        assert "Row 2" in result.output
        assert "nothing was saved" in result.output
        assert _ids(runner) == []

    def test_import_partial_strict(self, runner, tmp_path):
        path = tmp_path / "in.csv"
        path.write_text(
            "resource,coreTime,type\nWV01,2024-01-01T09:00:00Z,fsv\nWV01,2024-01-01T09:00:00Z,warp\n"
        )
        result = runner.invoke(main, ["import", str(path), "--strict"])
        assert result.exit_code == 1
        assert _ids(runner) == []

    def test_import_partial(self, runner, tmp_path):
        path = tmp_path / "in.csv"
        path.write_text(
            "resource,coreTime,type\nWV01,2024-01-01T09:00:00Z,fsv\nWV01,2024-01-01T09:00:00Z,warp\n"
        )
        result = runner.invoke(main, ["import", str(path)])
        assert result.exit_code == 0
        assert "skipped 1 problems" in result.output
        assert len(_ids(runner)) == 1

    def test_export_to_stdout(self, runner):
        _add(runner, "-n", "Pass, north")
        result = runner.invoke(main, ["export"])
        lines = result.output.splitlines()
        assert lines[0].startswith("name,resource,coreTime")
        assert lines[1].startswith('"Pass, north",WV01,2024-01-01T09:00:00.000Z,fsv,5,2,false')

    def test_export_to_file(self, runner, tmp_path):
        _add(runner)
        out = tmp_path / "out.csv"
        result = runner.invoke(main, ["export", str(out), "--time-only"])
        assert result.exit_code == 0
        assert ",09:00:00," in out.read_text()


class TestChart:
    def test_chart_json(self, runner):
        _add(runner)
        result = runner.invoke(
            main, ["chart", "--date", "2024-01-01", "--preset", "full_day_default", "--json"]
        )
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["window"] == [0, 1440]
        assert data["entries"][0]["range"] == [535, 543]

    def test_chart_custom_window(self, runner):
        _add(runner)
        result = runner.invoke(
            main, ["chart", "--date", "2024-01-01", "--start", "10:00", "--end", "12:00", "--json"]
        )
        data = json.loads(result.output)
        assert data["window"] == [600, 720]
        assert data["entries"] == []

    def test_chart_window_across_midnight(self, runner):
        runner.invoke(main, ["add", "-r", "WV01", "-t", "2024-01-02T01:00:00Z", "--type", "fsv"])
        result = runner.invoke(
            main, ["chart", "--date", "2024-01-01", "--start", "22:00", "--end", "02:00", "--json"]
        )
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["window"] == [1320, 1560]
        assert len(data["entries"]) == 1

    def test_chart_text(self, runner):
        _add(runner, "-n", "Pass 12")
        result = runner.invoke(
            main, ["chart", "--date", "2024-01-01", "--preset", "day_shift", "--dst"]
        )
        assert result.exit_code == 0
        assert "Day Shift" in result.output
        assert "No activities in this window." in result.output

    def test_chart_start_without_end(self, runner):
        result = runner.invoke(main, ["chart", "--start", "10:00"])
        assert result.exit_code != 0


class TestTypes:
    def test_show_default(self, runner):
        result = runner.invoke(main, ["types"])
        assert result.exit_code == 0
        assert "Appointment" in result.output

    def test_set_and_reset(self, runner):
        result = runner.invoke(main, ["types", "set", "fsv", "--label", "Flight Support", "--pre", "8"])
        assert result.exit_code == 0

        shown = json.loads(runner.invoke(main, ["types", "show", "--json"]).output)
        fsv = next(t for t in shown if t["key"] == "fsv")
        assert fsv["label"] == "Flight Support"
        assert fsv["preActionDuration"] == 8
        assert fsv["postActionDuration"] == 2
        assert fsv["customized"] is True

        runner.invoke(main, ["types", "reset", "fsv"])
        shown = json.loads(runner.invoke(main, ["types", "show", "--json"]).output)
        assert next(t for t in shown if t["key"] == "fsv")["label"] == "FSV"

    def test_set_unknown(self, runner):
        result = runner.invoke(main, ["types", "set", "warp", "--label", "x"])
        assert result.exit_code == 1

    def test_new_activity_uses_override(self, runner):
        runner.invoke(main, ["types", "set", "fsv", "--post", "20"])
        _add(runner)
        listed = json.loads(runner.invoke(main, ["list", "--json"]).output)
        assert listed[0]["postActionDuration"] == 20


class TestPresets:
    def test_list(self, runner):
        result = runner.invoke(main, ["presets", "dst", "off"])
        assert result.exit_code == 0
        result = runner.invoke(main, ["presets"])
        assert "Night Shift (23:00-07:00 MST / 06:00-14:00 UTC)" in result.output
        assert "* full_day_default" in result.output

    def test_select(self, runner):
        runner.invoke(main, ["presets", "select", "night_shift"])
        assert "* night_shift" in runner.invoke(main, ["presets", "list"]).output

    def test_select_unknown(self, runner):
        result = runner.invoke(main, ["presets", "select", "nope"])
        assert result.exit_code == 1

    def test_add_and_remove(self, runner):
        result = runner.invoke(
            main, ["presets", "add", "briefing", "--label", "Briefing", "--start", "08:00", "--end", "09:00"]
        )
        assert result.exit_code == 0
        assert "briefing" in runner.invoke(main, ["presets", "list"]).output

        result = runner.invoke(main, ["presets", "add", "day_shift", "--label", "X", "--start", "01:00", "--end", "02:00"])
        assert result.exit_code == 1

        result = runner.invoke(main, ["presets", "remove", "briefing"])
        assert result.exit_code == 0
        assert runner.invoke(main, ["presets", "remove", "briefing"]).exit_code == 1

    def test_edit(self, runner):
        runner.invoke(main, ["presets", "dst", "off"])
        runner.invoke(
            main, ["presets", "add", "briefing", "--label", "Briefing", "--start", "08:00", "--end", "09:00"]
        )

        result = runner.invoke(
            main, ["presets", "edit", "briefing", "--label", "Long Briefing", "--end", "10:30"]
        )

        assert result.exit_code == 0
        assert "Long Briefing (08:00-10:30 MST / 15:00-17:30 UTC)" in runner.invoke(
            main, ["presets", "list"]
        ).output

    def test_edit_builtin(self, runner):
        result = runner.invoke(main, ["presets", "edit", "day_shift", "--label", "Mine"])
        assert result.exit_code == 1
        assert "No custom preset" in result.output
