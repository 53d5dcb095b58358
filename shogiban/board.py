"""
Board representation: square and piece-stand addressing, piece stands and
the position itself.

This module provides:
- Address types: Square, StandPlace, StandKind, StandIndex
- Stand class holding a player's captured (unpromoted) pieces
- Board class with occupancy, stands and the in-place move operation
- Editing aids (flip owner / flip promotion)
- Standard initial position setup
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple, Union

from .errors import InvariantError
from .piece import (
    Kind, Player, Piece, STAND_ORDER, JAPANESE_PIECE_NAMES, SHORT_PIECE_NAMES,
    demote_kind, promote_kind, flip_kind,
)
from .utils import BOARD_SIZE, JAPANESE_Y_COORDS, JAPANESE_TURN_NAME, ZENKAKU_FILES


@dataclass(frozen=True)
class Square:
    """盤上のマス。file は右から 0..8、rank は上から 0..8"""
    file: int
    rank: int

    def __post_init__(self):
        if not 0 <= self.file < BOARD_SIZE:
            raise InvariantError(f"File {self.file} is out of range.")
        if not 0 <= self.rank < BOARD_SIZE:
            raise InvariantError(f"Rank {self.rank} is out of range.")

    def __str__(self) -> str:
        return f"{self.file + 1}{self.rank + 1}"


@dataclass(frozen=True)
class StandPlace:
    """駒台そのもの (移動先としてのみ使う)"""
    player: Player


@dataclass(frozen=True)
class StandKind:
    """駒台上の駒 (駒種で指定)"""
    player: Player
    kind: Kind


@dataclass(frozen=True)
class StandIndex:
    """駒台上の駒 (持ち駒のある駒種の中での並び順で指定)"""
    player: Player
    index: int

    def __post_init__(self):
        if not 0 <= self.index < len(STAND_ORDER):
            raise InvariantError(f"Index {self.index} is out of range.")


Origin = Union[Square, StandKind, StandIndex]
Destination = Union[Square, StandPlace]


class Stand:
    """駒台。成っていない駒種ごとの枚数を持つ"""

    def __init__(self):
        self._counts: Dict[Kind, int] = {}

    def has(self, kind: Kind) -> bool:
        return self.count(kind) > 0

    def count(self, kind: Kind) -> int:
        return self._counts.get(kind, 0)

    def push(self, kind: Kind, num: int = 1) -> None:
        """駒を num 枚加える (成り駒は元に戻して置く)"""
        if num <= 0:
            raise InvariantError(f"Cannot push {num} pieces")
        kind = demote_kind(kind)
        self._counts[kind] = self.count(kind) + num

    def pop(self, kind: Kind) -> None:
        if not self.has(kind):
            raise InvariantError(f"Piece {kind} not found in this stand")
        self._counts[kind] -= 1

    def non_empty_kind_count(self) -> int:
        return sum(1 for n in self._counts.values() if n > 0)

    def kind_at(self, index: int) -> Kind:
        """持ち駒のある駒種を STAND_ORDER 順に並べたときの index 番目"""
        if not 0 <= index < self.non_empty_kind_count():
            raise InvariantError(f"Index {index} is out of range.")
        return [k for k in STAND_ORDER if self.has(k)][index]

    def is_empty(self) -> bool:
        return self.non_empty_kind_count() == 0

    def items(self) -> List[Tuple[Kind, int]]:
        return [(k, self.count(k)) for k in STAND_ORDER if self.has(k)]

    def total(self) -> int:
        return sum(self._counts.values())

    def clone(self) -> 'Stand':
        stand = Stand()
        stand._counts = dict(self._counts)
        return stand

    def __len__(self) -> int:
        return self.non_empty_kind_count()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Stand):
            return NotImplemented
        return self.items() == other.items()

    def __repr__(self) -> str:
        return f"Stand({dict((k.value, n) for k, n in self.items())})"


class Board:
    """局面 (81マス + 先後の駒台)。move 等で直接書き換える"""

    def __init__(self):
        # squares[file][rank]
        self.squares: List[List[Optional[Piece]]] = [
            [None for _ in range(BOARD_SIZE)] for __ in range(BOARD_SIZE)]
        self.stands: Dict[Player, Stand] = {Player.FIRST: Stand(), Player.SECOND: Stand()}

    def get(self, square: Square) -> Optional[Piece]:
        return self.squares[square.file][square.rank]

    def set(self, square: Square, piece: Optional[Piece]) -> None:
        self.squares[square.file][square.rank] = piece

    def stand(self, player: Player) -> Stand:
        return self.stands[Player(player)]

    def piece_at(self, origin: Origin) -> Optional[Piece]:
        """移動元から駒を解決する。駒がなければ None"""
        if isinstance(origin, Square):
            return self.get(origin)
        stand = self.stand(origin.player)
        if isinstance(origin, StandKind):
            if stand.has(origin.kind):
                return Piece(origin.kind, origin.player)
            return None
        if isinstance(origin, StandIndex):
            if origin.index < stand.non_empty_kind_count():
                return Piece(stand.kind_at(origin.index), origin.player)
            return None
        raise InvariantError(f"Unknown origin {origin!r}")

    def can_move(self, origin: Origin) -> bool:
        return self.piece_at(origin) is not None

    def move(self, origin: Origin, destination: Destination) -> None:
        """駒を動かす。取った駒は成りを戻して手番側の駒台へ"""
        if origin == destination:
            return

        piece = self.piece_at(origin)
        if piece is None:
            raise InvariantError(f"Piece to be moved is not found at {origin!r}")

        # 移動先に駒があれば取る
        if isinstance(destination, Square):
            captured = self.get(destination)
            if captured is not None:
                self.stand(piece.owner).push(captured.kind)

        # 移動元から取り除く
        if isinstance(origin, Square):
            self.set(origin, None)
        else:
            self.stand(origin.player).pop(piece.kind)

        if isinstance(destination, Square):
            self.set(destination, Piece(piece.kind, piece.owner))
        elif isinstance(destination, StandPlace):
            self.stand(destination.player).push(piece.kind)
        else:
            raise InvariantError(f"Unknown destination {destination!r}")

    def _occupied(self, square: Square) -> Piece:
        piece = self.get(square)
        if piece is None:
            raise InvariantError(f"Square {square} has no piece")
        return piece

    def promote(self, square: Square) -> None:
        piece = self._occupied(square)
        self.set(square, Piece(promote_kind(piece.kind), piece.owner))

    def flip_owner(self, square: Square) -> None:
        piece = self._occupied(square)
        self.set(square, Piece(piece.kind, piece.owner.opponent))

    def flip_promotion(self, square: Square) -> None:
        piece = self._occupied(square)
        self.set(square, Piece(flip_kind(piece.kind), piece.owner))

    def pieces(self) -> Iterator[Tuple[Square, Piece]]:
        for rank in range(BOARD_SIZE):
            for file in range(BOARD_SIZE):
                piece = self.squares[file][rank]
                if piece is not None:
                    yield Square(file, rank), piece

    def count_pieces(self, player: Player) -> int:
        """盤上と駒台にある player の駒の総数"""
        on_board = sum(1 for _, p in self.pieces() if p.owner == player)
        return on_board + self.stand(player).total()

    def clone(self) -> 'Board':
        board = Board()
        board.squares = [list(col) for col in self.squares]
        board.stands = {p: s.clone() for p, s in self.stands.items()}
        return board

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self.squares == other.squares and self.stands == other.stands

    def __str__(self) -> str:
        """柿木形式に近いテキスト盤面"""
        lines = [self._stand_line(Player.SECOND),
                 '  ' + ''.join(f' {f}' for f in reversed(ZENKAKU_FILES)),
                 '+' + '-' * 27 + '+']
        for rank in range(BOARD_SIZE):
            row = ''
            for file in reversed(range(BOARD_SIZE)):
                piece = self.squares[file][rank]
                if piece is None:
                    row += ' ・'
                else:
                    name = SHORT_PIECE_NAMES[piece.kind]
                    row += (' ' if piece.owner == Player.FIRST else 'v') + name
            lines.append(f"|{row}|{JAPANESE_Y_COORDS[rank]}")
        lines.append('+' + '-' * 27 + '+')
        lines.append(self._stand_line(Player.FIRST))
        return '\n'.join(lines)

    def _stand_line(self, player: Player) -> str:
        label = JAPANESE_TURN_NAME[player] + 'の持駒：'
        items = self.stand(player).items()
        if not items:
            return label + 'なし'
        return label + '　'.join(
            JAPANESE_PIECE_NAMES[k] + (str(n) if n > 1 else '') for k, n in items)


def standard_setup() -> Board:
    """標準的な初期配置を作成"""
    from .sfen import STANDARD_SFEN, decode_sfen
    return decode_sfen(STANDARD_SFEN)
