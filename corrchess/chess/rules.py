"""
The rules engine the game layer depends on.

Move generation, check detection and the castling / en passant rules are not implemented here. RulesEngine is the
capability set the rest of the package relies on; PythonChessRules fulfils it with the python-chess library.
Tests can substitute any object with the same methods.
"""

from typing import Optional, Protocol

import chess

from corrchess.chess.fen import decode, encode
from corrchess.chess.moves import Move
from corrchess.chess.pieces import Piece
from corrchess.chess.position import Position
from corrchess.chess.square import Square
from corrchess.core.exceptions import IllegalMoveError, MalformedPositionError
from corrchess.core.shared_types import Color, PieceType, TerminalStatus


class RulesEngine(Protocol):
    """Everything the game layer needs to know about the rules of chess."""

    def is_legal(self, position: Position, move: Move) -> bool: ...

    def legal_moves(self, position: Position) -> list[Move]:
        """Finite, duplicate free, in no particular order."""
        ...

    def apply(self, position: Position, move: Move) -> Position:
        """Only defined for legal moves."""
        ...

    def terminal_status(self, position: Position) -> TerminalStatus: ...

    def piece_at(self, position: Position, square: Square) -> Optional[Piece]: ...

    def is_in_check(self, position: Position) -> bool: ...


# --- python-chess binding ---
TO_PYTHON_CHESS_PIECE: dict[PieceType, chess.PieceType] = {
    PieceType.PAWN: chess.PAWN,
    PieceType.KNIGHT: chess.KNIGHT,
    PieceType.BISHOP: chess.BISHOP,
    PieceType.ROOK: chess.ROOK,
    PieceType.QUEEN: chess.QUEEN,
    PieceType.KING: chess.KING,
}
FROM_PYTHON_CHESS_PIECE: dict[chess.PieceType, PieceType] = {
    value: key for key, value in TO_PYTHON_CHESS_PIECE.items()
}


class PythonChessRules:
    """RulesEngine backed by python-chess. Stateless: every call rebuilds a board from the position's FEN."""

    def is_legal(self, position: Position, move: Move) -> bool:
        return self._is_legal(self._board(position), self._to_chess_move(move))

    def legal_moves(self, position: Position) -> list[Move]:
        return [self._from_chess_move(m) for m in self._board(position).legal_moves]

    def apply(self, position: Position, move: Move) -> Position:
        board = self._board(position)
        chess_move = self._to_chess_move(move)
        if not self._is_legal(board, chess_move):
            raise IllegalMoveError(
                f"Cannot apply illegal move {move.to_uci()} to {encode(position)}"
            )
        board.push(chess_move)
        # "fen" mode: always record the skipped square after a double push, like standard FEN does
        return decode(board.fen(en_passant="fen"))

    def terminal_status(self, position: Position) -> TerminalStatus:
        board = self._board(position)
        if board.is_checkmate():
            return TerminalStatus.CHECKMATE
        if board.is_stalemate():
            return TerminalStatus.STALEMATE
        return TerminalStatus.ONGOING

    def piece_at(self, position: Position, square: Square) -> Optional[Piece]:
        piece = self._board(position).piece_at(square.index)
        if piece is None:
            return None
        color = Color.WHITE if piece.color == chess.WHITE else Color.BLACK
        return Piece(FROM_PYTHON_CHESS_PIECE[piece.piece_type], color)

    def is_in_check(self, position: Position) -> bool:
        return self._board(position).is_check()

    def _is_legal(self, board: chess.Board, chess_move: chess.Move) -> bool:
        if not board.is_legal(chess_move):
            return False
        # python-chess also accepts castling written as the king landing on its own rook (e1h1).
        # Castling is only ever the king's two-file move here, the form legal_moves lists.
        if board.is_castling(chess_move):
            file_distance = abs(
                chess.square_file(chess_move.to_square)
                - chess.square_file(chess_move.from_square)
            )
            return file_distance == 2
        return True

    # -- conversion helpers --
    def _board(self, position: Position) -> chess.Board:
        fen = encode(position)
        try:
            return chess.Board(fen)
        except ValueError as e:
            raise MalformedPositionError(
                f"Rules engine rejected position {fen!r}: {e}"
            ) from e

    def _to_chess_move(self, move: Move) -> chess.Move:
        promotion = (
            TO_PYTHON_CHESS_PIECE[move.promote_to] if move.promote_to else None
        )
        return chess.Move(
            move.from_square.index, move.to_square.index, promotion=promotion
        )

    def _from_chess_move(self, chess_move: chess.Move) -> Move:
        promote_to = (
            FROM_PYTHON_CHESS_PIECE[chess_move.promotion]
            if chess_move.promotion
            else None
        )
        return Move(
            from_square=Square.from_index(chess_move.from_square),
            to_square=Square.from_index(chess_move.to_square),
            promote_to=promote_to,
        )
