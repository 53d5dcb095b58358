"""
Game record: moves, start/end markers and the branching record tree.

This module provides:
- Move and Marker, the values stored in a record
- RecordTree, an append-only tree of moves that merges equal siblings and
  keeps one selected child per node
- Record, the session object: replays positions along the selected line and
  accepts new legal moves from a host UI
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Union

from .board import Board, Square, StandKind, StandIndex, Origin, Destination, standard_setup
from .errors import InvariantError
from .piece import Player
from . import rules

logger = logging.getLogger(__name__)


class Marker(Enum):
    """棋譜の先頭・末尾を表す目印"""
    START = 'start'
    END = 'end'


@dataclass(frozen=True)
class Move:
    """指し手。player, 移動元, 移動先, 成り で比較される"""
    player: Player
    origin: Union[Square, StandKind]
    destination: Square
    promote: bool = False

    @property
    def is_drop(self) -> bool:
        return isinstance(self.origin, StandKind)


RecordValue = Union[Move, Marker]

ROOT = 0


class RecordTree:
    """指し手の木。ノードは整数 id で配列に格納する"""

    def __init__(self):
        self._values: List[RecordValue] = [Marker.START]
        self._parents: List[Optional[int]] = [None]
        self._children: List[List[int]] = [[]]
        self._selected: List[Optional[int]] = [None]

    def __len__(self) -> int:
        return len(self._values)

    def value(self, node: int) -> RecordValue:
        return self._values[node]

    def parent(self, node: int) -> Optional[int]:
        return self._parents[node]

    def children(self, node: int) -> List[int]:
        return list(self._children[node])

    def has_children(self, node: int) -> bool:
        return bool(self._children[node])

    def add_child(self, node: int, value: RecordValue) -> int:
        """子を追加する。同じ値の子が既にあればそれを返す"""
        if self._values[node] is Marker.END:
            raise InvariantError("Cannot add a child after the end marker")
        if value is Marker.START:
            raise InvariantError("The start marker can only be the root")
        for child in self._children[node]:
            if self._values[child] == value:
                return child

        child = len(self._values)
        self._values.append(value)
        self._parents.append(node)
        self._children.append([])
        self._selected.append(None)
        self._children[node].append(child)
        if self._selected[node] is None:
            self._selected[node] = 0
        return child

    def select_child(self, node: int, value: RecordValue) -> int:
        for i, child in enumerate(self._children[node]):
            if self._values[child] == value:
                self._selected[node] = i
                return child
        raise InvariantError(f"{value!r} is not a child of node {node}")

    def selected_child(self, node: int) -> Optional[int]:
        i = self._selected[node]
        if i is None:
            return None
        return self._children[node][i]

    def view(self, node: int = ROOT) -> List[int]:
        """node から選択中の子をたどった葉までの id 列"""
        path = [node]
        child = self.selected_child(node)
        while child is not None:
            path.append(child)
            child = self.selected_child(child)
        return path


class Record:
    """対局セッション (棋譜の木 + 局面の再生)"""

    def __init__(self):
        self.tree = RecordTree()

    @classmethod
    def from_moves(cls, moves: Sequence[RecordValue]) -> 'Record':
        record = cls()
        record.add_moves(moves)
        return record

    @classmethod
    def from_kif(cls, text: str) -> 'Record':
        from .kif import decode_kif
        return cls.from_moves(decode_kif(text))

    def add_moves(self, moves: Sequence[RecordValue], node: int = ROOT) -> int:
        """手順を node から順に追加・選択し、最後のノードを返す"""
        values = list(moves)
        if node == ROOT:
            if not values or values[0] is not Marker.START:
                raise InvariantError("A move list must begin with the start marker")
            values = values[1:]
        for value in values:
            child = self.tree.add_child(node, value)
            self.tree.select_child(node, value)
            node = child
        logger.debug("Added %d record entries", len(values))
        return node

    def replace_moves(self, moves: Sequence[RecordValue]) -> None:
        self.tree = RecordTree()
        self.add_moves(moves)

    def _view_nodes(self) -> List[int]:
        return self.tree.view(ROOT)

    def view(self) -> List[RecordValue]:
        return [self.tree.value(n) for n in self._view_nodes()]

    def __len__(self) -> int:
        return len(self._view_nodes())

    def node_at(self, index: int) -> int:
        nodes = self._view_nodes()
        if not 0 <= index < len(nodes):
            raise IndexError(f"Index {index} is out of range of the record")
        return nodes[index]

    def get_position_at(self, index: int) -> Board:
        """初期局面から index 番目までの手を再生した局面"""
        moves = self.view()
        if not 0 <= index < len(moves):
            raise IndexError(f"Index {index} is out of range of the record")
        return replay(moves, index)

    def _previous_mover(self, moves: List[RecordValue], index: int) -> Player:
        value = moves[index]
        if isinstance(value, Move):
            return value.player
        # 平手では先手から指す
        return Player.SECOND

    def try_adding_legal_move(self, index: int, origin: Origin, destination: Destination,
                              ask_promotion: Optional[Callable[[], bool]] = None) -> bool:
        """index 番目の局面に合法手を追加・選択する。不正なら False"""
        moves = self.view()
        if not 0 <= index < len(moves):
            raise IndexError(f"Index {index} is out of range of the record")
        if moves[index] is Marker.END:
            logger.debug("Rejected move after the end of the game")
            return False

        board = replay(moves, index)
        piece = board.piece_at(origin)
        if piece is None:
            logger.debug("Rejected move: no piece at %r", origin)
            return False

        previous = self._previous_mover(moves, index)
        # 同じ側の連続した手は受け付けない
        if piece.owner != previous.opponent:
            logger.debug("Rejected move: %s is not to move", piece.owner.name)
            return False
        if not rules.is_legal_move(board, origin, destination):
            logger.debug("Rejected move: %r -> %r is illegal", origin, destination)
            return False

        promote = False
        if rules.is_promotable_move(board, origin, destination) and ask_promotion is not None:
            promote = bool(ask_promotion())

        if isinstance(origin, StandIndex):
            origin = StandKind(origin.player, piece.kind)
        move = Move(piece.owner, origin, destination, promote)

        node = self.node_at(index)
        self.tree.add_child(node, move)
        self.tree.select_child(node, move)
        return True

    def select(self, index: int, value: RecordValue) -> None:
        """index 番目の次の手として value の分岐を選ぶ"""
        self.tree.select_child(self.node_at(index), value)

    def alternatives(self, index: int) -> List[RecordValue]:
        """index 番目の手と同じ親を持つ手 (分岐) の一覧"""
        parent = self.tree.parent(self.node_at(index))
        if parent is None:
            return [Marker.START]
        return [self.tree.value(c) for c in self.tree.children(parent)]

    def legal_destinations(self, index: int, origin: Origin) -> List[Square]:
        return rules.legal_destinations(self.get_position_at(index), origin)

    def is_promotable_move(self, index: int, origin: Origin, destination: Destination) -> bool:
        return rules.is_promotable_move(self.get_position_at(index), origin, destination)

    def move_text(self, index: int) -> str:
        from .kif import encode_move
        return encode_move(self.view(), index)

    def move_texts(self) -> List[str]:
        """選択中の手順すべての表記 (局面の再生は1回)"""
        from .kif import encode_moves
        return encode_moves(self.view())

    def branch_points(self) -> List[bool]:
        """選択中の手順の各手に分岐があるか"""
        result = []
        for node in self._view_nodes():
            parent = self.tree.parent(node)
            result.append(parent is not None and len(self.tree.children(parent)) > 1)
        return result

    def to_kif(self) -> str:
        from .kif import encode_kif
        return encode_kif(self.view())


def apply_value(board: Board, moves: Sequence[RecordValue], i: int) -> None:
    """i 番目の値を局面に適用する (目印は位置だけ確認する)"""
    value = moves[i]
    if value is Marker.START:
        if i != 0:
            raise InvariantError("The start marker must be at the beginning of a record")
    elif value is Marker.END:
        if i != len(moves) - 1:
            raise InvariantError("The end marker must be at the end of a record")
    elif isinstance(value, Move):
        board.move(value.origin, value.destination)
        if value.promote:
            board.promote(value.destination)
    else:
        raise InvariantError(f"Unknown record value {value!r}")


def replay(moves: Sequence[RecordValue], index: int) -> Board:
    """手順の先頭から index 番目までを標準初期局面に適用する"""
    board = standard_setup()
    for i in range(index + 1):
        apply_value(board, moves, i)
    return board
