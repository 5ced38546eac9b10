from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

import config
from app.main import app


@pytest.fixture
def client():
    return TestClient(app)


SMALL_STANDINGS = {
    "records": [
        {"teamId": "BOS", "wins": 30, "losses": 10},
        {"teamId": "LAL", "wins": 10, "losses": 30},
        {"teamId": "CHI", "wins": 20, "losses": 20},
        {"teamId": "MIA", "wins": 25, "losses": 15},
    ]
}


def test_health(client):
    res = client.get("/api/health")
    assert res.status_code == 200
    body = res.json()
    assert body["ok"] is True
    assert body["current_draft_year"] == config.CURRENT_DRAFT_YEAR


def test_teams(client):
    teams = client.get("/api/teams").json()
    assert len(teams) == 30
    assert {"team_id": "BOS", "abbreviation": "BOS", "name": "Celtics", "full_name": "Boston Celtics"} in teams


def test_configured_board(client):
    res = client.get("/api/draft/board/2026")
    assert res.status_code == 200
    board = res.json()["board"]
    assert board["year"] == 2026
    assert len(board["picks"]) == 30 * config.DRAFT_ROUNDS
    first = board["picks"][0]
    assert (first["round"], first["slot"], first["overall_no"]) == (1, 1, 1)


def test_configured_board_rounds_bounds(client):
    res = client.get("/api/draft/board/2026", params={"rounds": 1})
    assert res.status_code == 200
    assert len(res.json()["board"]["picks"]) == 30
    assert client.get("/api/draft/board/2026", params={"rounds": 0}).status_code == 422
    assert client.get("/api/draft/board/2026", params={"rounds": 500}).status_code == 422


def test_configured_board_missing_standings(client, monkeypatch, tmp_path):
    monkeypatch.setattr(config, "STANDINGS_PATH", str(tmp_path / "missing.json"))
    res = client.get("/api/draft/board/2026")
    assert res.status_code == 400
    body = res.json()
    assert body["ok"] is False
    assert body["error"]["code"] == "STANDINGS_INVALID"


def test_board_from_request(client):
    payload = {
        "year": 2026,
        "standings": SMALL_STANDINGS,
        "ledger": [{"teamId": "BOS", "incomingPicks": [{"year": 2026, "round": 1, "from": "via LAL"}]}],
        "team_ids": ["BOS", "LAL", "CHI", "MIA"],
        "rounds": 2,
    }
    res = client.post("/api/draft/board", json=payload)
    assert res.status_code == 200
    board = res.json()["board"]
    assert board["order_worst_to_best"] == ["LAL", "CHI", "MIA", "BOS"]
    assert len(board["picks"]) == 8
    lal = board["picks"][0]
    assert lal["original_team"] == "LAL"
    assert lal["owning_team"] == "BOS"
    assert lal["is_traded"] is True
    assert lal["from"] == "via LAL"


def test_board_from_request_errors(client):
    res = client.post("/api/draft/board", json={"year": 2026, "standings": {"teams": []}, "ledger": []})
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "STANDINGS_INVALID"

    res = client.post(
        "/api/draft/board",
        json={"year": 2026, "standings": SMALL_STANDINGS, "ledger": [], "team_ids": ["BOS", "XYZ"]},
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "TEAM_UNKNOWN"

    res = client.post("/api/draft/board", json={"standings": SMALL_STANDINGS})
    assert res.status_code == 422


def test_team_board_slots(client):
    res = client.get("/api/draft/board/2026/teams/okc")
    assert res.status_code == 200
    body = res.json()
    assert body["team"]["team_id"] == "OKC"
    assert all(p["owning_team"] == "OKC" for p in body["picks"])
    assert client.get("/api/draft/board/2026/teams/XYZ").status_code == 404


def test_team_assets(client):
    res = client.get("/api/draft/teams/SAS/assets/2026")
    assert res.status_code == 200
    body = res.json()
    via_sac = [p for p in body["incoming"] if p["from"] == "via SAC"][0]
    assert via_sac["protection_summary"].startswith("Top-12 protected (2026)")
    assert body["outgoing"] == []

    by_name = client.get("/api/draft/teams/San Antonio Spurs/assets/2026")
    assert by_name.status_code == 200
    assert by_name.json()["team"]["team_id"] == "SAS"

    empty = client.get("/api/draft/teams/BOS/assets/2026").json()
    assert empty["incoming"] == [] and empty["outgoing"] == []
    assert client.get("/api/draft/teams/XYZ/assets/2026").status_code == 404


def test_protection_evaluate(client):
    res = client.post(
        "/api/draft/protection/evaluate",
        json={
            "text": "Top-10 protected (2026), unprotected (2027)",
            "year": 2026,
            "position": 5,
            "positions_by_year": {"2026": 5, "2027": 5},
        },
    )
    assert res.status_code == 200
    body = res.json()
    assert body["summary"] == "Top-10 protected (2026), Unprotected (2027)"
    assert [r["type"] for r in body["rules"]] == ["TOP_N", "UNPROTECTED"]
    assert body["evaluation"]["conveys"] is False
    assert body["evaluation"]["next_year"] == 2027
    assert body["simulation"]["conveys_in_year"] == 2027


def test_protection_evaluate_parse_only(client):
    body = client.post("/api/draft/protection/evaluate", json={"text": ""}).json()
    assert body["has_protection"] is False
    assert body["summary"] == "Unprotected"
    assert body["evaluation"] is None and body["simulation"] is None


def test_protection_evaluate_manual_rules(client):
    ok = client.post(
        "/api/draft/protection/evaluate",
        json={"rules": {"type": "INVERSE_RANGE", "start": 1, "end": 4}, "year": 2026, "position": 3},
    ).json()
    assert ok["evaluation"]["conveys"] is True

    bad = client.post("/api/draft/protection/evaluate", json={"rules": {"type": "RANGE", "start": 5, "end": 1}})
    assert bad.status_code == 400
    assert bad.json()["error"]["code"] == "PROTECTION_INVALID"
