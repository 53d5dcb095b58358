"""
Piece kinds, players, movement patterns and piece-related constants.

This module defines:
- Kind enum for the 8 base kinds and 6 promoted kinds
- Player enum for the first and second mover
- Promotion / demotion / flip maps
- Movement table of (file delta, rank delta, continuable) offsets
- Piece class representing the occupant of a square
"""

from enum import Enum, IntEnum
from typing import Dict, List, Tuple


class Kind(str, Enum):
    """駒種 (値は従来の駒種文字列)"""
    KING = 'K'
    ROOK = 'R'
    BISHOP = 'B'
    GOLD = 'G'
    SILVER = 'S'
    KNIGHT = 'N'
    LANCE = 'L'
    PAWN = 'P'
    PROMOTED_ROOK = 'R+'
    PROMOTED_BISHOP = 'B+'
    PROMOTED_SILVER = 'S+'
    PROMOTED_KNIGHT = 'N+'
    PROMOTED_LANCE = 'L+'
    PROMOTED_PAWN = 'P+'

    @property
    def promoted(self) -> bool:
        return self.value.endswith('+')

    def __str__(self) -> str:
        return self.value


class Player(IntEnum):
    """手番 (0: 先手, 1: 後手)"""
    FIRST = 0
    SECOND = 1

    @property
    def opponent(self) -> 'Player':
        return Player(1 - self)


# 成りと戻しのマッピング
PROMOTE_MAP: Dict[Kind, Kind] = {
    Kind.PAWN: Kind.PROMOTED_PAWN,
    Kind.LANCE: Kind.PROMOTED_LANCE,
    Kind.KNIGHT: Kind.PROMOTED_KNIGHT,
    Kind.SILVER: Kind.PROMOTED_SILVER,
    Kind.BISHOP: Kind.PROMOTED_BISHOP,
    Kind.ROOK: Kind.PROMOTED_ROOK,
}
DEMOTE_MAP: Dict[Kind, Kind] = {v: k for k, v in PROMOTE_MAP.items()}

# 駒台での並び順
STAND_ORDER: List[Kind] = [
    Kind.KING, Kind.ROOK, Kind.BISHOP, Kind.GOLD,
    Kind.SILVER, Kind.KNIGHT, Kind.LANCE, Kind.PAWN,
]

# 一組の駒の枚数 (成る前の駒種ごと, 計40枚)
PIECE_SET_COUNTS: Dict[Kind, int] = {
    Kind.KING: 2, Kind.ROOK: 2, Kind.BISHOP: 2, Kind.GOLD: 4,
    Kind.SILVER: 4, Kind.KNIGHT: 4, Kind.LANCE: 4, Kind.PAWN: 18,
}

_KING_STEPS = [(-1, -1), (0, -1), (1, -1), (-1, 0), (1, 0), (-1, 1), (0, 1), (1, 1)]
_GOLD_STEPS = [(-1, -1), (0, -1), (1, -1), (-1, 0), (1, 0), (0, 1)]
_ORTHOGONAL = [(0, -1), (0, 1), (-1, 0), (1, 0)]
_DIAGONAL = [(-1, -1), (-1, 1), (1, -1), (1, 1)]

Offset = Tuple[int, int, bool]


def _steps(deltas: List[Tuple[int, int]]) -> List[Offset]:
    return [(dx, dy, False) for dx, dy in deltas]


def _lines(deltas: List[Tuple[int, int]]) -> List[Offset]:
    return [(dx, dy, True) for dx, dy in deltas]


# 駒の移動パターン (先手視点, dy=-1 が前進)。第3要素は走り駒かどうか
MOVES: Dict[Kind, List[Offset]] = {
    Kind.KING: _steps(_KING_STEPS),
    Kind.ROOK: _lines(_ORTHOGONAL),
    Kind.BISHOP: _lines(_DIAGONAL),
    Kind.GOLD: _steps(_GOLD_STEPS),
    Kind.SILVER: _steps([(-1, -1), (0, -1), (1, -1), (-1, 1), (1, 1)]),
    Kind.KNIGHT: _steps([(-1, -2), (1, -2)]),
    Kind.LANCE: _lines([(0, -1)]),
    Kind.PAWN: _steps([(0, -1)]),
    Kind.PROMOTED_ROOK: _lines(_ORTHOGONAL) + _steps(_DIAGONAL),
    Kind.PROMOTED_BISHOP: _lines(_DIAGONAL) + _steps(_ORTHOGONAL),
    Kind.PROMOTED_SILVER: _steps(_GOLD_STEPS),
    Kind.PROMOTED_KNIGHT: _steps(_GOLD_STEPS),
    Kind.PROMOTED_LANCE: _steps(_GOLD_STEPS),
    Kind.PROMOTED_PAWN: _steps(_GOLD_STEPS),
}

# 駒の日本語名 (成銀・成桂・成香は2文字)
JAPANESE_PIECE_NAMES: Dict[Kind, str] = {
    Kind.KING: '玉', Kind.ROOK: '飛', Kind.BISHOP: '角', Kind.GOLD: '金',
    Kind.SILVER: '銀', Kind.KNIGHT: '桂', Kind.LANCE: '香', Kind.PAWN: '歩',
    Kind.PROMOTED_ROOK: '龍', Kind.PROMOTED_BISHOP: '馬',
    Kind.PROMOTED_SILVER: '成銀', Kind.PROMOTED_KNIGHT: '成桂',
    Kind.PROMOTED_LANCE: '成香', Kind.PROMOTED_PAWN: 'と',
}

# 盤上表示用の1文字名
SHORT_PIECE_NAMES: Dict[Kind, str] = dict(JAPANESE_PIECE_NAMES)
SHORT_PIECE_NAMES.update({
    Kind.PROMOTED_SILVER: '全', Kind.PROMOTED_KNIGHT: '圭', Kind.PROMOTED_LANCE: '杏',
})

# 日本語名から駒種への逆マップ (略字・異体字を含む)
KIND_FROM_JP: Dict[str, Kind] = {v: k for k, v in JAPANESE_PIECE_NAMES.items()}
KIND_FROM_JP.update({
    '王': Kind.KING, '竜': Kind.PROMOTED_ROOK, '全': Kind.PROMOTED_SILVER,
    '圭': Kind.PROMOTED_KNIGHT, '杏': Kind.PROMOTED_LANCE,
})


def promote_kind(kind: Kind) -> Kind:
    """駒種を成った形にする（成れない駒はそのまま）"""
    return PROMOTE_MAP.get(kind, kind)


def demote_kind(kind: Kind) -> Kind:
    """駒種を元の形に戻す（成り駒→成る前の駒）"""
    return DEMOTE_MAP.get(kind, kind)


def flip_kind(kind: Kind) -> Kind:
    """成り・不成を反転する"""
    if kind in DEMOTE_MAP:
        return DEMOTE_MAP[kind]
    return PROMOTE_MAP.get(kind, kind)


def is_promotable(kind: Kind) -> bool:
    return kind in PROMOTE_MAP


class Piece:
    """盤上の駒 (駒種と持ち主)。構造的に比較される"""
    __slots__ = ("kind", "owner")

    def __init__(self, kind: Kind, owner: Player):
        self.kind = Kind(kind)
        self.owner = Player(owner)

    def clone(self) -> 'Piece':
        return Piece(self.kind, self.owner)

    @property
    def promoted(self) -> bool:
        return self.kind.promoted

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Piece):
            return NotImplemented
        return self.kind == other.kind and self.owner == other.owner

    def __hash__(self) -> int:
        return hash((self.kind, self.owner))

    def __repr__(self) -> str:
        return f"{self.kind.value}{'S' if self.owner == Player.FIRST else 'G'}"
