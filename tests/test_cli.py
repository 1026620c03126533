import json

import pytest

from core.config import get_config
from run_column_analysis import main


@pytest.fixture
def csv_file(tmp_path):
    path = tmp_path / "agents.csv"
    path.write_text(
        "Agent Name,AI Model,Directory Path,Labels\nbot,gpt-4o,/workspace/bot,dev\n",
        encoding="utf-8",
    )
    return path


def test_cli_table(csv_file, capsys):
    assert main(["--input", str(csv_file)]) == 0
    out = capsys.readouterr().out
    assert "Agent Name" in out
    assert "Overall confidence" in out


def test_cli_json(csv_file, capsys):
    assert main(["--input", str(csv_file), "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["recommended_mapping"]["Directory Path"] == "workspace"


def test_cli_empty_file(tmp_path, capsys):
    path = tmp_path / "empty.csv"
    path.write_text("", encoding="utf-8")
    assert main(["--input", str(path)]) == 1
    assert "Analysis failed" in capsys.readouterr().err


def test_cli_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        main(["--input", str(tmp_path / "missing.csv")])


def test_cli_strategy_leaves_global_config(csv_file, capsys):
    before = get_config().mapping.assignment_strategy
    assert main(["--input", str(csv_file), "--strategy", "optimal", "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["recommended_mapping"]["Agent Name"] == "name"
    assert get_config().mapping.assignment_strategy == before
