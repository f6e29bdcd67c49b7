from datetime import datetime, UTC

import pytest
from sqlmodel import create_engine
from sqlmodel.pool import StaticPool

from sportsmatch.errors import NotFound
from sportsmatch.models import Team, Player, Match
from sportsmatch.store import SqlEntityStore, QueryEngine, FindOptions, Include, Sort


@pytest.fixture(name="sql_store")
def sql_store_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    store = SqlEntityStore(engine=engine)
    yield store
    store.clear()
    store.close()


def add_team(store, name, founded_year=1900):
    return store.insert("teams", Team(
        name=name, country="England", founded_year=founded_year, stadium=f"{name} Park"
    ))


def test_insert_and_get(sql_store):
    team = add_team(sql_store, "Red")

    loaded = sql_store.get("teams", team.id)

    assert loaded.name == "Red"
    assert sql_store.get("teams", "missing") is None


def test_update_refreshes_updated_at_only(sql_store):
    team = add_team(sql_store, "Red")

    updated = sql_store.update("teams", team.id, {})

    assert updated.id == team.id
    assert updated.name == team.name
    assert updated.updated_at > team.updated_at.replace(tzinfo=None)


def test_update_missing_raises(sql_store):
    with pytest.raises(NotFound):
        sql_store.update("teams", "missing", {"name": "x"})


def test_cascade_delete(sql_store):
    red = add_team(sql_store, "Red")
    blue = add_team(sql_store, "Blue")
    sql_store.insert("players", Player(name="R1", position="GK", age=30, team_id=red.id))
    sql_store.insert("players", Player(name="B1", position="GK", age=30, team_id=blue.id))
    sql_store.insert("matches", Match(
        home_team_id=blue.id, away_team_id=red.id, date=datetime(2025, 1, 1, tzinfo=UTC),
        prediction={"home_win_probability": 0.5, "away_win_probability": 0.3,
                    "draw_probability": 0.2, "confidence": 0.6},
    ))

    removed = sql_store.delete("teams", red.id)

    assert len(removed["players"]) == 1
    assert len(removed["matches"]) == 1
    assert [p.name for p in sql_store.all("players")] == ["B1"]
    assert sql_store.all("matches") == []
    with pytest.raises(NotFound):
        sql_store.delete("teams", red.id)


def test_query_engine_over_sql_store(sql_store):
    query = QueryEngine(sql_store)
    red = add_team(sql_store, "Red")
    blue = add_team(sql_store, "Blue")
    sql_store.insert("players", Player(name="Bench", position="DF", age=19, team_id=red.id))
    sql_store.insert("players", Player(name="Star", position="FW", age=27, team_id=red.id, rating=8.8))
    sql_store.insert("matches", Match(
        home_team_id=red.id, away_team_id=blue.id, date=datetime(2025, 1, 1, tzinfo=UTC),
    ))

    players = query.find_many("players", FindOptions(
        where={"team_id": red.id},
        sort=Sort.desc("rating"),
        include=(Include("team", select=("name",)),),
    ))
    team = query.find_one("teams", red.id, FindOptions(include=(
        Include("home_matches", include=(Include("away_team", select=("name",)),)),
    )))

    assert [p["name"] for p in players] == ["Star", "Bench"]
    assert players[0]["team"] == {"name": "Red"}
    assert team["home_matches"][0]["away_team"] == {"name": "Blue"}


def test_json_prediction_round_trip(sql_store):
    red = add_team(sql_store, "Red")
    blue = add_team(sql_store, "Blue")
    match = sql_store.insert("matches", Match(
        home_team_id=red.id, away_team_id=blue.id, date=datetime(2025, 1, 1, tzinfo=UTC),
    ))

    prediction = {"home_win_probability": 0.4, "away_win_probability": 0.4,
                  "draw_probability": 0.2, "predicted_score": {"home": 1, "away": 0},
                  "confidence": 0.3}
    sql_store.update("matches", match.id, {"prediction": prediction})

    assert sql_store.get("matches", match.id).prediction == prediction


def test_find_unique(sql_store):
    add_team(sql_store, "Red")

    assert sql_store.find_unique("teams", name="Red").country == "England"
    assert sql_store.find_unique("teams", name="Blue") is None


def test_all_preserves_insertion_order(sql_store):
    names = ["Charlie", "Alpha", "Bravo", "Delta"]
    teams = [add_team(sql_store, name) for name in names]

    stamps = [team.created_at for team in teams]
    assert stamps == sorted(stamps)
    assert len(set(stamps)) == len(stamps)
    assert [team.name for team in sql_store.all("teams")] == names


def test_insert_ignores_caller_supplied_id(sql_store):
    red = add_team(sql_store, "Red")

    copy = sql_store.insert("teams", Team(
        id=red.id, name="Impostor", country="England", founded_year=1900, stadium="Nowhere"
    ))

    assert copy.id != red.id
    assert sql_store.get("teams", red.id).name == "Red"
