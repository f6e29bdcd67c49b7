from datetime import datetime, UTC

import pytest

from sportsmatch.errors import NotFound
from sportsmatch.models import Team, Player, Match, User
from sportsmatch.store import EntityStore


def add_team(store: EntityStore, name: str, founded_year: int = 1900) -> Team:
    return store.insert("teams", Team(
        name=name, country="England", founded_year=founded_year, stadium=f"{name} Park"
    ))


def add_match(store: EntityStore, home: Team, away: Team, **fields) -> Match:
    fields.setdefault("date", datetime(2025, 1, 1, 15, 0, tzinfo=UTC))
    return store.insert("matches", Match(home_team_id=home.id, away_team_id=away.id, **fields))


def test_insert_assigns_id_and_timestamps(store):
    team = add_team(store, "Red")

    assert team.id
    assert team.created_at == team.updated_at
    assert store.get("teams", team.id).name == "Red"


def test_insert_applies_player_stat_defaults(store):
    team = add_team(store, "Red")
    player = store.insert("players", Player(name="A", position="Forward", age=20, team_id=team.id))

    assert (player.goals, player.assists, player.matches_played) == (0, 0, 0)
    assert player.rating is None


def test_get_missing_returns_none(store):
    assert store.get("teams", "does-not-exist") is None
    assert store.get("teams", None) is None


def test_all_preserves_insertion_order(store):
    names = ["Charlie", "Alpha", "Bravo"]
    for name in names:
        add_team(store, name)

    assert [team.name for team in store.all("teams")] == names


def test_insert_ignores_caller_supplied_id(store):
    red = add_team(store, "Red")

    copy = store.insert("teams", Team(
        id=red.id, name="Impostor", country="England", founded_year=1900, stadium="Nowhere"
    ))

    assert copy.id != red.id
    assert store.get("teams", red.id).name == "Red"
    assert [team.name for team in store.all("teams")] == ["Red", "Impostor"]


def test_empty_update_only_refreshes_updated_at(store):
    team = add_team(store, "Red")

    updated = store.update("teams", team.id, {})

    assert updated.updated_at > team.updated_at
    before = team.model_dump(exclude={"updated_at"})
    after = updated.model_dump(exclude={"updated_at"})
    assert after == before


def test_update_merges_fields_and_keeps_identity(store):
    team = add_team(store, "Red")

    updated = store.update("teams", team.id, {
        "stadium": "New Ground", "id": "hijacked", "created_at": datetime(2000, 1, 1, tzinfo=UTC)
    })

    assert updated.id == team.id
    assert updated.created_at == team.created_at
    assert updated.stadium == "New Ground"
    assert updated.name == "Red"
    # The earlier snapshot is untouched
    assert team.stadium == "Red Park"


def test_update_missing_raises_not_found(store):
    with pytest.raises(NotFound):
        store.update("teams", "missing", {"name": "x"})


def test_update_unknown_field_rejected(store):
    team = add_team(store, "Red")
    with pytest.raises(ValueError):
        store.update("teams", team.id, {"nickname": "The Reds"})


def test_team_delete_cascades(store):
    red = add_team(store, "Red")
    blue = add_team(store, "Blue")
    green = add_team(store, "Green")
    store.insert("players", Player(name="R1", position="GK", age=30, team_id=red.id))
    keeper = store.insert("players", Player(name="B1", position="GK", age=30, team_id=blue.id))
    add_match(store, red, blue)
    add_match(store, green, red)
    survivor = add_match(store, blue, green)

    removed = store.delete("teams", red.id)

    assert [t.id for t in removed["teams"]] == [red.id]
    assert len(removed["players"]) == 1
    assert len(removed["matches"]) == 2
    assert store.get("teams", red.id) is None
    assert [p.id for p in store.all("players")] == [keeper.id]
    assert [m.id for m in store.all("matches")] == [survivor.id]


def test_simple_delete_does_not_cascade(store):
    red = add_team(store, "Red")
    blue = add_team(store, "Blue")
    match = add_match(store, red, blue)

    removed = store.delete("matches", match.id)

    assert list(removed) == ["matches"]
    assert len(store.all("teams")) == 2


def test_delete_twice_raises_not_found(store):
    red = add_team(store, "Red")
    store.delete("teams", red.id)

    with pytest.raises(NotFound):
        store.delete("teams", red.id)
    assert store.all("teams") == []


def test_find_unique_by_email(store):
    store.insert("users", User(email="a@example.com", password_hash="x"))
    store.insert("users", User(email="b@example.com", password_hash="y", name="B"))

    assert store.find_unique("users", email="b@example.com").name == "B"
    assert store.find_unique("users", email="c@example.com") is None


def test_unknown_collection_rejected(store):
    with pytest.raises(ValueError):
        store.all("stadiums")


def test_seed_sample_data(store):
    store.seed_sample_data()

    assert len(store.all("teams")) == 2
    assert len(store.all("players")) == 2
    match = store.all("matches")[0]
    assert match.prediction["home_win_probability"] == 0.45
