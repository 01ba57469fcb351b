"""
Tests for the report formats.
"""

import json

import pytest

from pitsim.core.config import SimulationConfig
from pitsim.harness.reporters import (
    CSV_HEADERS,
    compact_line,
    escape_field,
    print_comparison,
    print_results,
    team_names,
    to_csv,
    to_json,
)
from pitsim.harness.statistics import TrialTally, aggregate


@pytest.fixture
def result():
    tally = TrialTally(
        iterations=1000,
        team_a_wins=600,
        team_b_wins=390,
        draws=10,
        turns=12_500,
        team_a_damage=8_000,
        team_b_damage=6_500,
        team_a_survivors=600,
        team_b_survivors=390,
        team_a_survivor_health=3_000,
        team_b_survivor_health=1_170,
    )
    return aggregate("goblin vs rat", tally)


@pytest.fixture
def group_result(result):
    return result.model_copy(update={"scenario": '[2x goblin, rat] vs [orc "boss"]'})


def test_csv_header(result):
    """Test the fixed column order."""
    lines = to_csv([result]).split("\n")
    assert lines[0] == ",".join(CSV_HEADERS)
    assert lines[0].startswith("scenario,iterations,teamAWins,teamBWins,draws,teamAWinRate")
    assert len(CSV_HEADERS) == 15


def test_csv_row(result):
    """Test the number formats of a row."""
    row = to_csv([result]).split("\n")[1].split(",")
    assert row[:5] == ["goblin vs rat", "1000", "600", "390", "10"]
    assert row[5] == "0.6000"
    assert row[7] == "0.0304"
    assert row[8] == "12.50"


def test_csv_escaping(group_result):
    """Test quoting of commas and quotes."""
    assert escape_field("plain") == "plain"
    assert escape_field("a,b") == '"a,b"'
    assert escape_field('say "hi"') == '"say ""hi"""'
    assert escape_field("two\nlines") == '"two\nlines"'
    assert escape_field("carriage\rreturn") == '"carriage\rreturn"'
    row = to_csv([group_result]).split("\n")[1]
    assert row.startswith('"[2x goblin, rat] vs [orc ""boss""]",1000,')


def test_json_single_object(result):
    """Test the nested layout of one result."""
    payload = json.loads(to_json([result], 1000, 42, SimulationConfig(max_turns=200)))
    assert set(payload) == {"scenario", "config", "results", "statistics"}
    assert payload["config"]["seed"] == 42
    assert payload["config"]["maxTurns"] == 200
    assert payload["results"] == {"teamAWins": 600, "teamBWins": 390, "draws": 10}
    assert payload["statistics"]["teamAWinRate"] == 0.6
    assert payload["statistics"]["confidenceInterval95"] == pytest.approx(0.0304, abs=1e-4)


def test_json_list_for_several_results(result, group_result):
    """Test that several results become a list."""
    payload = json.loads(to_json([result, group_result], 1000, 42))
    assert isinstance(payload, list)
    assert [entry["scenario"] for entry in payload] == [result.scenario, group_result.scenario]


def test_compact_line(result):
    """Test the one-line summary."""
    assert compact_line(result) == "goblin vs rat: 60.0% vs 39.0% (±3.0%, n=1000)"


def test_team_names():
    """Test splitting a scenario label into its sides."""
    assert team_names("goblin vs rat") == ("goblin", "rat")
    assert team_names("[2x goblin] vs [rat]") == ("2x goblin", "rat")
    assert team_names("solo") == ("Team A", "Team B")


def test_console_reports(result, group_result, capsys):
    """Test that the rich reports print the labels and rates."""
    print_results(group_result)
    print_comparison([result, group_result])
    out = capsys.readouterr().out
    assert "60.0%" in out
    assert "[2x goblin, rat]" in out
    assert "Avg survivors" not in out
