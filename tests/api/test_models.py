from uuid import UUID, uuid4

import pytest
from pydantic import ValidationError

from corrchess.api.models import (
    MAX_USERNAME_LENGTH,
    CreateGameRequest,
    ListGamesRequest,
    RegisterPlayerRequest,
    SubmitMoveRequest,
)
from corrchess.core.exceptions import InvalidRequestError
from corrchess.core.shared_types import Color


@pytest.fixture
def mock_id() -> UUID:
    return uuid4()


# -- Validation - RegisterPlayerRequest --
def test_username_is_stripped() -> None:
    assert RegisterPlayerRequest(username="  magnus ").username == "magnus"


@pytest.mark.parametrize("username", ["", "   ", "x" * (MAX_USERNAME_LENGTH + 1)])
def test_invalid_username(username: str) -> None:
    with pytest.raises(InvalidRequestError):
        RegisterPlayerRequest(username=username)


# -- Validation - CreateGameRequest --
def test_color_is_optional(mock_id: UUID) -> None:
    request = CreateGameRequest(player_id=mock_id, opponent_id=uuid4())
    assert request.color is None


def test_color_from_text(mock_id: UUID) -> None:
    request = CreateGameRequest(player_id=mock_id, opponent_id=uuid4(), color="black")
    assert request.color == Color.BLACK


def test_unknown_color(mock_id: UUID) -> None:
    with pytest.raises(ValidationError):
        CreateGameRequest(player_id=mock_id, opponent_id=uuid4(), color="green")


def test_ids_must_be_uuids() -> None:
    with pytest.raises(ValidationError):
        CreateGameRequest(player_id="alice", opponent_id="bob")


# -- Validation - SubmitMoveRequest --
@pytest.mark.parametrize("move, expected", [("e2e4", "e2e4"), (" E7E8Q ", "e7e8q")])
def test_move_is_normalized(mock_id: UUID, move: str, expected: str) -> None:
    request = SubmitMoveRequest(game_id=mock_id, player_id=uuid4(), move=move)
    assert request.move == expected


def test_move_text_is_not_judged_here(mock_id: UUID) -> None:
    """Whether the text is a move at all is up to the move validator."""
    request = SubmitMoveRequest(game_id=mock_id, player_id=uuid4(), move="nonsense")
    assert request.move == "nonsense"


def test_list_games_defaults_to_all(mock_id: UUID) -> None:
    assert not ListGamesRequest(player_id=mock_id).active_only
