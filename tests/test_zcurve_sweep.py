from __future__ import annotations

import json

import pytest

from tools.zcurve_sweep import main, parse_ether


def test_parse_ether() -> None:
    assert parse_ether("1") == 10**18
    assert parse_ether("8.5") == 8_500_000_000_000_000_000
    assert parse_ether(" 0.01 ") == 10**16
    with pytest.raises(ValueError):
        parse_ether("abc")
    with pytest.raises(ValueError):
        parse_ether("-1")
    with pytest.raises(ValueError):
        parse_ether("0.0000000000000000001")


def test_sweep_report(capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(
        [
            "--sale-cap", "1000000",
            "--quad-cap", "500000",
            "--targets", "1000,50",
            "--unit-scale", str(10**18),
            "--points", "4",
        ]
    )
    assert rc == 0
    report = json.loads(capsys.readouterr().out)
    assert report["schema"] == "zquote/zcurve-sweep/v1"
    assert report["sale_cap"] == 10**24

    first, second = report["scenarios"]
    target = 1_000 * 10**18
    assert abs(first["raised_at_cap"] - target) * 10**6 <= target
    assert first["divisor"] < second["divisor"]
    assert first["price_at_25pct"] < first["price_at_50pct"] == first["price_at_75pct"]
    assert first["tokens_for_1_eth"] > 0

    curve = report["curve"]
    assert len(curve) == 5
    assert curve[-1]["percent_sold"] == 100.0


def test_sweep_writes_file(tmp_path) -> None:
    out = tmp_path / "sweep" / "report.json"
    rc = main(["--targets", "1", "--points", "2", "--out", str(out)])
    assert rc == 0
    report = json.loads(out.read_text(encoding="utf-8"))
    assert len(report["scenarios"]) == 1
    assert len(report["curve"]) == 3


def test_sweep_rejects_quad_cap_above_sale_cap() -> None:
    with pytest.raises(SystemExit):
        main(["--sale-cap", "10", "--quad-cap", "20"])


def test_sweep_sale_cap_below_one_token(capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(["--sale-cap", "0.5", "--quad-cap", "0.25", "--targets", "0.01", "--points", "2"])
    assert rc == 0
    (scenario,) = json.loads(capsys.readouterr().out)["scenarios"]
    assert scenario["price_at_100pct"] > 0
    assert scenario["price_at_100pct"] <= scenario["raised_at_cap"]
