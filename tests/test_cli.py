from datetime import date
from pathlib import Path

import pytest

import fincast.cli as cli
import fincast.goals as goals
import fincast.periods as periods
from fincast import __version__


@pytest.fixture(autouse=True)
def isolated_run(tmp_path: Path, monkeypatch) -> None:
    """Run every command from an empty directory with a pinned date and quiet logging."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(periods, "_today", lambda: date(2024, 4, 10))
    monkeypatch.setattr(goals, "_today", lambda: date(2024, 4, 10))
    monkeypatch.setattr(cli, "configure_logging", lambda level: None)


@pytest.fixture()
def transactions_csv(tmp_path: Path) -> Path:
    path = tmp_path / "transactions.csv"
    path.write_text(
        "date,amount,direction,category\n"
        "2024-01-03,3000,income,Salary\n"
        "2024-01-15,1000,expense,Rent\n"
        "2024-02-03,3000,income,Salary\n"
        "2024-02-15,1100,expense,Rent\n"
        "2024-03-03,3000,income,Salary\n"
        "2024-03-15,1200,expense,Rent\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture()
def plans_csv(tmp_path: Path) -> Path:
    path = tmp_path / "plans.csv"
    path.write_text(
        "id,name,goal_amount,current_amount,monthly_contribution\n"
        "p1,Holidays,3000,1000,250\n"
        "p2,Car,10000,0,0\n",
        encoding="utf-8",
    )
    return path


def test_version(capsys) -> None:
    cli.main(["--version"])

    assert capsys.readouterr().out.strip() == f"fincast version {__version__}"


def test_no_command_prints_help(capsys) -> None:
    cli.main([])

    assert "usage:" in capsys.readouterr().out


def test_forecast_command(transactions_csv: Path, capsys) -> None:
    cli.main(["--transactions", str(transactions_csv), "forecast"])

    out = capsys.readouterr().out
    assert "=== History ===" in out
    assert "=== Expense forecast for 2024-04 ===" in out
    assert "increasing" in out
    assert "1133.33" in out


def test_forecast_with_insights_without_api_key(transactions_csv: Path, monkeypatch, capsys) -> None:
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)

    cli.main(["--transactions", str(transactions_csv), "forecast", "--insights"])

    assert "Keep tracking your expenses" in capsys.readouterr().out


def test_forecast_with_too_little_history(tmp_path: Path) -> None:
    path = tmp_path / "short.csv"
    path.write_text("date,amount\n2024-03-01,-50\n", encoding="utf-8")

    with pytest.raises(SystemExit, match="Not enough data yet"):
        cli.main(["--transactions", str(path), "forecast"])


def test_forecast_without_transactions_file() -> None:
    with pytest.raises(SystemExit):
        cli.main(["forecast"])


def test_goals_command(plans_csv: Path, capsys) -> None:
    cli.main(["--plans", str(plans_csv), "goals"])

    out = capsys.readouterr().out
    assert "=== Goal forecasts ===" in out
    assert "Holidays" in out
    assert "no data yet" in out


def test_goals_command_for_one_plan(plans_csv: Path, capsys) -> None:
    cli.main(["--plans", str(plans_csv), "goals", "--plan-id", "p1"])

    out = capsys.readouterr().out
    assert "=== Goal forecast: Holidays ===" in out
    assert "aggressive" in out


def test_goals_command_with_unknown_plan(plans_csv: Path) -> None:
    with pytest.raises(SystemExit):
        cli.main(["--plans", str(plans_csv), "goals", "--plan-id", "nope"])


def test_goal_check_command(capsys) -> None:
    cli.main(
        ["goal-check", "--current", "1000", "--goal", "10000", "--income", "5000", "--expense", "3000"]
    )

    out = capsys.readouterr().out
    assert "=== Goal check ===" in out
    assert "easy" in out


def test_progress_command(plans_csv: Path, capsys) -> None:
    cli.main(["--plans", str(plans_csv), "progress", "--plan-id", "p1"])

    out = capsys.readouterr().out
    assert "=== Projected progress: Holidays ===" in out
    assert "2024-05" in out
    assert "2024-12" in out


def test_simulate_preset_with_explicit_baseline(capsys) -> None:
    cli.main(["simulate", "--name", "salary raise", "--income", "3000", "--expense", "2000"])

    out = capsys.readouterr().out
    assert "=== Scenario: Salary raise ===" in out
    assert "=== Cumulative balance ===" in out


def test_simulate_ad_hoc_from_history(transactions_csv: Path, capsys) -> None:
    cli.main(
        [
            "--transactions",
            str(transactions_csv),
            "simulate",
            "--change",
            "-100",
            "--affects",
            "expense",
            "--category",
            "Rent",
            "--months",
            "6",
        ]
    )

    out = capsys.readouterr().out
    assert "By cutting Rent you will save 100 EUR/month" in out
    assert "2024-09" in out


def test_simulate_requires_a_scenario() -> None:
    with pytest.raises(SystemExit):
        cli.main(["simulate", "--income", "3000", "--expense", "2000"])


def test_simulate_unknown_scenario() -> None:
    with pytest.raises(SystemExit):
        cli.main(["simulate", "--name", "Lottery", "--income", "3000", "--expense", "2000"])


def test_scenarios_command_includes_configured_scenarios(tmp_path: Path, capsys) -> None:
    config = tmp_path / "custom.toml"
    config.write_text(
        '[[scenarios]]\nname = "Gym membership"\nmonthly_change = 45\naffects = "expense"\n',
        encoding="utf-8",
    )

    cli.main(["--config", str(config), "scenarios"])

    out = capsys.readouterr().out
    assert "Buying a car" in out
    assert "Gym membership" in out


def test_csv_display_mode_writes_files(tmp_path: Path, capsys) -> None:
    out_dir = tmp_path / "exports"

    cli.main(
        [
            "--display-mode",
            "csv",
            "--output",
            str(out_dir),
            "simulate",
            "--name",
            "Buying a car",
            "--income",
            "3000",
            "--expense",
            "2000",
        ]
    )

    names = sorted(p.name for p in out_dir.glob("*.csv"))
    assert len(names) == 2
    assert sum(name.startswith("scenario_timeline_") for name in names) == 1
    assert "===" not in capsys.readouterr().out
