from __future__ import annotations

import json

from typer.testing import CliRunner

from mapsmith.__main__ import app

runner = CliRunner()


def test_inspect_lists_keys_and_lazy_markers():
    result = runner.invoke(app, ["inspect", "sample_records:Envelope"])
    assert result.exit_code == 0, result.output
    lines = result.stdout.splitlines()
    assert "kind\tprimitive\tkind" in lines
    assert "name\tprimitive\tname (lazy)" in lines
    assert "*\tcatch-all (lazy)" in lines


def test_inspect_with_named_view():
    result = runner.invoke(app, ["inspect", "sample_records:Account", "--name-tag", "api"])
    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == ["userId\tprimitive\tuser_id"]


def test_convert_from_stdin():
    payload = {"name": "a", "x": 1}
    result = runner.invoke(app, ["convert", "sample_records:WithExtra"], input=json.dumps(payload))
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == payload


def test_convert_from_file_drops_unknown_keys(tmp_path):
    src = tmp_path / "in.json"
    src.write_text(json.dumps({"title": "t", "count": 2, "bogus": True}), encoding="utf-8")
    result = runner.invoke(app, ["convert", "sample_records:Flat", str(src)])
    assert result.exit_code == 0, result.output
    out = json.loads(result.stdout)
    assert out["title"] == "t"
    assert out["count"] == 2
    assert "bogus" not in out


def test_convert_strict_failure_exits_1():
    result = runner.invoke(
        app, ["convert", "sample_records:Flat", "--strict"], input=json.dumps({"bogus": 1})
    )
    assert result.exit_code == 1


def test_convert_rejects_non_object_json():
    result = runner.invoke(app, ["convert", "sample_records:Flat"], input="[1, 2]")
    assert result.exit_code == 1


def test_convert_rejects_malformed_json():
    result = runner.invoke(app, ["convert", "sample_records:Flat"], input="{nope")
    assert result.exit_code == 1


def test_bad_target_is_a_usage_error():
    result = runner.invoke(app, ["inspect", "sample_records:Missing"])
    assert result.exit_code == 2
    result = runner.invoke(app, ["inspect", "json:JSONDecoder"])
    assert result.exit_code == 2
    result = runner.invoke(app, ["inspect", "no_colon"])
    assert result.exit_code == 2
