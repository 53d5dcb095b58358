"""
SFEN position notation.

This module provides:
- decode_sfen / parse_sfen: position string -> Board (and side to move,
  move number)
- encode_sfen: Board -> position string
- The standard initial position string

Rank groups are written from the first player's far edge (rank 0) and each
one lists files from 9 down to 1, so the last character of a rank group is
file index 0.
"""

import re
from collections import Counter
from typing import List, NamedTuple, Optional, Tuple

from .board import Board, Square
from .errors import NotationError
from .piece import Kind, Piece, Player, PIECE_SET_COUNTS, promote_kind, demote_kind
from .utils import BOARD_SIZE

STANDARD_SFEN = 'lnsgkgsnl/1r5b1/ppppppppp/9/9/9/PPPPPPPPP/1B5R1/LNSGKGSNL b - 1'

PIECE_CHARACTERS = 'KkRrBbGgSsNnLlPp'

_PIECE_RE = re.compile(rf'(\+)?([{PIECE_CHARACTERS}])')
_RANK_TOKEN_RE = re.compile(rf'[1-9]|\+?[{PIECE_CHARACTERS}]')
_STAND_TOKEN_RE = re.compile(rf'([0-9]{{1,2}})?([{PIECE_CHARACTERS}])')
_SFEN_RE = re.compile(
    r'(?:sfen +)?'
    rf'(?P<board>[+1-9{PIECE_CHARACTERS}/]+) +'
    r'(?P<turn>[bw]) +'
    rf'(?P<stand>-|[0-9{PIECE_CHARACTERS}]+) +'
    r'(?P<number>[0-9]{1,9})')

# SFEN で持ち駒を書く順
_STAND_WRITE_ORDER = [Kind.ROOK, Kind.BISHOP, Kind.GOLD, Kind.SILVER,
                      Kind.KNIGHT, Kind.LANCE, Kind.PAWN, Kind.KING]


class SfenPosition(NamedTuple):
    board: Board
    turn: Player
    move_number: int


def _parse_piece(token: str) -> Piece:
    match = _PIECE_RE.fullmatch(token)
    if match is None:
        raise NotationError(f"Cannot parse {token!r} as a piece")
    kind = Kind(match.group(2).upper())
    if match.group(1):
        if promote_kind(kind) == kind:
            raise NotationError(f"{token!r} cannot be promoted")
        kind = promote_kind(kind)
    owner = Player.FIRST if match.group(2).isupper() else Player.SECOND
    return Piece(kind, owner)


def _parse_rank(text: str) -> List[Optional[Piece]]:
    """1段分を左 (9筋) から順に読む"""
    if not text:
        raise NotationError("Empty rank in SFEN board")
    cells: List[Optional[Piece]] = []
    pos = 0
    while pos < len(text):
        match = _RANK_TOKEN_RE.match(text, pos)
        if match is None:
            raise NotationError(f"Cannot parse {text!r} as rank pieces")
        token = match.group(0)
        if token.isdigit():
            cells.extend([None] * int(token))
        else:
            cells.append(_parse_piece(token))
        pos = match.end()
    if len(cells) != BOARD_SIZE:
        raise NotationError(f"Rank {text!r} covers {len(cells)} squares, expected {BOARD_SIZE}")
    return cells


def _parse_stand(text: str) -> List[Tuple[Piece, int]]:
    if text == '-':
        return []
    result = []
    pos = 0
    while pos < len(text):
        match = _STAND_TOKEN_RE.match(text, pos)
        if match is None:
            raise NotationError(f"Cannot parse {text!r} as piece stand pieces")
        num = int(match.group(1)) if match.group(1) else 1
        if num <= 0:
            raise NotationError(f"Invalid piece count in {text!r}")
        result.append((_parse_piece(match.group(2)), num))
        pos = match.end()
    return result


def _check_piece_counts(census: Counter, fragment: str) -> None:
    """駒種ごとの枚数が一組の駒の枚数を超えていないか"""
    for kind, num in census.items():
        if num > PIECE_SET_COUNTS[kind]:
            raise NotationError(
                f"{fragment!r} has {num} pieces of kind {kind}, "
                f"more than the {PIECE_SET_COUNTS[kind]} in a set")


def parse_sfen(text: str) -> SfenPosition:
    """SFEN 文字列を解析して局面・手番・手数を返す"""
    match = _SFEN_RE.fullmatch(text.strip())
    if match is None:
        raise NotationError(f"Cannot parse {text!r} as an SFEN string")

    ranks = match.group('board').split('/')
    if len(ranks) != BOARD_SIZE:
        raise NotationError(f"SFEN board has {len(ranks)} ranks, expected {BOARD_SIZE}")

    board = Board()
    for rank, rank_text in enumerate(ranks):
        cells = _parse_rank(rank_text)
        for i, piece in enumerate(cells):
            board.set(Square(BOARD_SIZE - i - 1, rank), piece)

    census = Counter(demote_kind(p.kind) for _, p in board.pieces())
    _check_piece_counts(census, match.group('board'))
    for piece, num in _parse_stand(match.group('stand')):
        census[piece.kind] += num
        _check_piece_counts(census, match.group('stand'))
        board.stand(piece.owner).push(piece.kind, num)

    turn = Player.FIRST if match.group('turn') == 'b' else Player.SECOND
    return SfenPosition(board, turn, int(match.group('number')))


def decode_sfen(text: str) -> Board:
    """SFEN 文字列から局面を作成"""
    return parse_sfen(text).board


def _piece_token(piece: Piece) -> str:
    base = demote_kind(piece.kind).value
    letter = base if piece.owner == Player.FIRST else base.lower()
    return ('+' if piece.promoted else '') + letter


def encode_sfen(board: Board, turn: Player = Player.FIRST, move_number: int = 1) -> str:
    """局面を SFEN 文字列に変換"""
    ranks = []
    for rank in range(BOARD_SIZE):
        text, empty = '', 0
        for file in reversed(range(BOARD_SIZE)):
            piece = board.get(Square(file, rank))
            if piece is None:
                empty += 1
                continue
            if empty:
                text, empty = text + str(empty), 0
            text += _piece_token(piece)
        if empty:
            text += str(empty)
        ranks.append(text)

    stand = ''
    for player in (Player.FIRST, Player.SECOND):
        for kind in _STAND_WRITE_ORDER:
            num = board.stand(player).count(kind)
            if num:
                stand += (str(num) if num > 1 else '') + _piece_token(Piece(kind, player))

    side = 'b' if turn == Player.FIRST else 'w'
    return f"{'/'.join(ranks)} {side} {stand or '-'} {move_number}"
