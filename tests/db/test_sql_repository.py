"""Unit tests for corrchess/db/sql_repository.py"""

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from corrchess.chess.fen import STARTING_FEN, encode
from corrchess.chess.game import Game, MoveRecord
from corrchess.chess.rules import PythonChessRules
from corrchess.core.exceptions import ConflictError
from corrchess.core.models import GameModel, PlayerModel
from corrchess.core.shared_types import GameStatus
from corrchess.db.sql_repository import SQLGameRepository, SQLPlayerRepository

CREATED = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
WINDOW = timedelta(hours=72)


def new_players(db: Session) -> tuple[PlayerModel, PlayerModel]:
    players = SQLPlayerRepository(db)
    return players.create_player(f"white-{uuid4()}"), players.create_player(
        f"black-{uuid4()}"
    )


def new_game(db: Session, created_at: datetime = CREATED) -> Game:
    white, black = new_players(db)
    return Game.create(white.id, black.id, created_at)


def first_move(game: Game, uci: str = "e2e4") -> tuple[MoveRecord, Game]:
    return game.submit_move(
        PythonChessRules(), game.white_id, uci, 0, CREATED, WINDOW
    )


# -- PLAYERS --
def test_create_and_find_player(db_session_repo: Session) -> None:
    players = SQLPlayerRepository(db_session_repo)
    alice = players.create_player("alice")

    assert players.get_player(alice.id) == alice
    assert players.get_player_by_username("alice") == alice
    assert players.get_player(uuid4()) is None
    assert players.get_player_by_username("nobody") is None


# -- GAMES --
def test_create_game(db_session_repo: Session) -> None:
    """Conversion from a GameModel to DBGame for a new entry to the database."""
    model = new_game(db_session_repo).to_model()

    repo = SQLGameRepository(db_session_repo)
    record_in_db = repo.create_game(model)
    assert isinstance(record_in_db, GameModel)
    assert record_in_db == model
    assert repo.load_game(model.id) == model


def test_get_unknown_game(db_session_repo: Session) -> None:
    """Should return None if ID does not match anything in database."""
    repo = SQLGameRepository(db_session_repo)
    repo.create_game(new_game(db_session_repo).to_model())
    assert repo.load_game(uuid4()) is None


def test_save_game_with_move(db_session_repo: Session) -> None:
    repo = SQLGameRepository(db_session_repo)
    game = Game.from_model(repo.create_game(new_game(db_session_repo).to_model()))
    record, after = first_move(game)

    with repo.atomic():
        repo.save_game(after.to_model(), expected_prior_position=STARTING_FEN)
        repo.append_move_record(record.to_model())

    stored = repo.load_game(game.id)
    assert stored == after.to_model()
    assert stored.current_turn == "black"
    assert stored.move_deadline == CREATED + WINDOW
    assert repo.count_move_records(game.id) == 1
    assert repo.list_move_records(game.id) == [record.to_model()]


def test_stale_write_is_refused(db_session_repo: Session, db_session_shared: Session) -> None:
    """Two sessions read the same game; the second one to write loses."""
    repo_a = SQLGameRepository(db_session_repo)
    repo_b = SQLGameRepository(db_session_shared)
    game = Game.from_model(repo_a.create_game(new_game(db_session_repo).to_model()))

    seen_by_b = Game.from_model(repo_b.load_game(game.id))
    record_a, after_a = first_move(game, "e2e4")
    record_b, after_b = first_move(seen_by_b, "d2d4")

    with repo_a.atomic():
        repo_a.save_game(after_a.to_model(), expected_prior_position=STARTING_FEN)
        repo_a.append_move_record(record_a.to_model())

    with pytest.raises(ConflictError):
        with repo_b.atomic():
            repo_b.save_game(after_b.to_model(), expected_prior_position=STARTING_FEN)
            repo_b.append_move_record(record_b.to_model())

    assert repo_a.load_game(game.id).current_fen == encode(after_a.current_position)
    assert [m.move_uci for m in repo_a.list_move_records(game.id)] == ["e2e4"]


def test_finished_game_is_never_rewritten(db_session_repo: Session) -> None:
    repo = SQLGameRepository(db_session_repo)
    game = Game.from_model(repo.create_game(new_game(db_session_repo).to_model()))

    with repo.atomic():
        repo.save_game(game.abandon(CREATED).to_model(), expected_prior_position=STARTING_FEN)

    # same position, but no longer ongoing
    with pytest.raises(ConflictError):
        with repo.atomic():
            repo.save_game(game.abandon(CREATED).to_model(), expected_prior_position=STARTING_FEN)
    assert repo.load_game(game.id).status == GameStatus.ABANDONED


def test_atomic_rolls_back_game_and_record(db_session_repo: Session) -> None:
    repo = SQLGameRepository(db_session_repo)
    game = Game.from_model(repo.create_game(new_game(db_session_repo).to_model()))
    record, after = first_move(game)
    with repo.atomic():
        repo.save_game(after.to_model(), expected_prior_position=STARTING_FEN)
        repo.append_move_record(record.to_model())

    reply_record, reply = after.submit_move(
        PythonChessRules(), after.black_id, "e7e5", 1, CREATED, WINDOW
    )
    # a second record for ply 0 violates the unique (game, ply) constraint
    duplicate = replace(reply_record.to_model(), ply=0)
    with pytest.raises(IntegrityError):
        with repo.atomic():
            repo.save_game(
                reply.to_model(),
                expected_prior_position=encode(after.current_position),
            )
            repo.append_move_record(duplicate)

    # neither half of the failed write survived
    assert repo.load_game(game.id) == after.to_model()
    assert repo.count_move_records(game.id) == 1


def test_list_games_for_player(db_session_repo: Session) -> None:
    repo = SQLGameRepository(db_session_repo)
    players = SQLPlayerRepository(db_session_repo)
    alice, bob, carol = (players.create_player(name) for name in ("alice", "bob", "carol"))

    early = Game.create(alice.id, bob.id, CREATED)
    urgent = replace(
        Game.create(carol.id, alice.id, CREATED + timedelta(hours=1)),
        move_deadline=CREATED + timedelta(hours=5),
    )
    relaxed = replace(
        Game.create(alice.id, carol.id, CREATED + timedelta(hours=2)),
        move_deadline=CREATED + timedelta(hours=50),
    )
    finished = Game.create(bob.id, alice.id, CREATED + timedelta(hours=3)).abandon(CREATED)
    unrelated = Game.create(bob.id, carol.id, CREATED)
    for game in (early, urgent, relaxed, finished, unrelated):
        repo.create_game(game.to_model())

    all_games = [g.id for g in repo.list_games_for_player(alice.id)]
    assert all_games == [finished.id, relaxed.id, urgent.id, early.id]

    active = [g.id for g in repo.list_games_for_player(alice.id, active_only=True)]
    assert active == [urgent.id, relaxed.id, early.id]

    ongoing = {g.id for g in repo.list_ongoing_games()}
    assert ongoing == {early.id, urgent.id, relaxed.id, unrelated.id}
