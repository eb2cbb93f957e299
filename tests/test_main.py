import json

from note_risk_agent.main import main


def test_cli_scores_synthetic_note(capsys):
    code = main(
        [
            "SPY",
            "QQQ",
            "--rating", "A+",
            "--months", "18",
            "--protection", "Hard Buffer",
            "--level", "80",
            "--autocallable",
            "--no-call", "6",
            "--synthetic",
            "--as-of", "2024-06-28",
        ]
    )

    out = json.loads(capsys.readouterr().out)
    assert code == 0
    assert 0 <= out["score"] <= 100
    assert [a["asset"] for a in out["assets"]] == ["SPY", "QQQ"]
    assert out["summary"] == "Based on SPY, QQQ with Hard Buffer at 80%"


def test_cli_rejects_invalid_terms(capsys):
    code = main(["SPY", "--rating", "A", "--months", "12", "--level", "150", "--synthetic"])

    assert code == 2
    assert "Invalid note terms" in capsys.readouterr().err
