"""
Move rules: legal destinations, move legality and the promotion rule.

This module provides:
- Legal destination generation for all piece kinds (stepping and sliding)
- Drop destinations for pieces held on a stand
- Move validation for board moves and drops
- Promotion zone rule

Two pawns on one file, pawn-drop mate, dead-end drops and self-check are
not checked here.
"""

from typing import List

from .board import Board, Square, StandKind, StandIndex, Origin, Destination
from .piece import MOVES, Kind, Player, is_promotable
from .utils import BOARD_SIZE, in_bounds

# 成り域の定義
PROMOTION_ZONE = {Player.FIRST: range(0, 3), Player.SECOND: range(6, 9)}


def _sign_for_owner(owner: Player) -> int:
    """プレイヤーの向きに応じた符号を返す"""
    return 1 if owner == Player.FIRST else -1


def _add_step_moves(board: Board, square: Square, owner: Player,
                    dx: int, dy: int, moves: List[Square]) -> None:
    """ステップ移動の手を追加"""
    nx, ny = square.file + dx, square.rank + dy * _sign_for_owner(owner)
    if not in_bounds(nx, ny):
        return
    target = board.squares[nx][ny]
    if target is None or target.owner != owner:
        moves.append(Square(nx, ny))


def _add_slider_moves(board: Board, square: Square, owner: Player,
                      dx: int, dy: int, moves: List[Square]) -> None:
    """スライド移動の手を追加"""
    actual_dy = dy * _sign_for_owner(owner)
    nx, ny = square.file + dx, square.rank + actual_dy
    while in_bounds(nx, ny):
        target = board.squares[nx][ny]
        if target is None:
            moves.append(Square(nx, ny))
        else:
            if target.owner != owner:
                moves.append(Square(nx, ny))
            break
        nx, ny = nx + dx, ny + actual_dy


def legal_destinations_from(board: Board, square: Square) -> List[Square]:
    """盤上の駒の移動可能先を生成"""
    piece = board.get(square)
    if piece is None:
        return []

    moves: List[Square] = []
    for dx, dy, continuable in MOVES[piece.kind]:
        if continuable:
            _add_slider_moves(board, square, piece.owner, dx, dy, moves)
        else:
            _add_step_moves(board, square, piece.owner, dx, dy, moves)
    return moves


def _drop_destinations(board: Board) -> List[Square]:
    """打つ手の着手先 (空きマスすべて)"""
    return [Square(x, y) for y in range(BOARD_SIZE) for x in range(BOARD_SIZE)
            if board.squares[x][y] is None]


def legal_destinations(board: Board, origin: Origin) -> List[Square]:
    """盤上・駒台どちらの移動元にも対応した移動可能先"""
    if isinstance(origin, Square):
        return legal_destinations_from(board, origin)
    if board.piece_at(origin) is None:
        return []
    return _drop_destinations(board)


def is_legal_move(board: Board, origin: Origin, destination: Destination) -> bool:
    """指し手が合法かチェック"""
    if not isinstance(destination, Square):
        return False
    if isinstance(origin, Square):
        return destination in legal_destinations_from(board, origin)
    if isinstance(origin, (StandKind, StandIndex)):
        return board.piece_at(origin) is not None and board.get(destination) is None
    return False


def can_promote(kind: Kind, owner: Player, from_y: int, to_y: int) -> bool:
    """任意成りの判定"""
    zone = PROMOTION_ZONE[owner]
    return is_promotable(kind) and (to_y in zone or from_y in zone)


def is_promotable_move(board: Board, origin: Origin, destination: Destination) -> bool:
    """成れる指し手かどうか (打つ手は成れない)"""
    if not isinstance(origin, Square) or not isinstance(destination, Square):
        return False
    piece = board.get(origin)
    if piece is None:
        return False
    return can_promote(piece.kind, piece.owner, origin.rank, destination.rank)
