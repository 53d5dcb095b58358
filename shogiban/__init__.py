"""
Shogiban Package

Shogi (Japanese chess) positions and game records: piece movement rules,
SFEN / KIF notation and a branching record tree, plus a pygame viewer.

Modules:
- piece: Piece kinds, players and movement patterns
- board: Square / stand addressing, piece stands and the board
- rules: Legal destinations, move legality and promotion
- sfen: SFEN position notation
- kif: KIF move-log notation
- record: Record tree and the game session
- errors: Exception types
- utils: Constants and helpers
- main: pygame viewer entry point
"""

from .piece import Kind, Player, Piece
from .board import Board, Square, StandPlace, StandKind, StandIndex, Stand, standard_setup
from .errors import ShogiError, InvariantError, NotationError
from .rules import legal_destinations_from, legal_destinations, is_legal_move, is_promotable_move
from .sfen import STANDARD_SFEN, decode_sfen, encode_sfen, parse_sfen
from .record import Marker, Move, Record, RecordTree
from .kif import decode_kif, encode_move, encode_moves, encode_kif

__version__ = "1.0.0"
__all__ = [
    'Kind', 'Player', 'Piece', 'Board', 'Square', 'StandPlace', 'StandKind',
    'StandIndex', 'Stand', 'standard_setup', 'ShogiError', 'InvariantError',
    'NotationError', 'legal_destinations_from', 'legal_destinations',
    'is_legal_move', 'is_promotable_move', 'STANDARD_SFEN', 'decode_sfen',
    'encode_sfen', 'parse_sfen', 'Marker', 'Move', 'Record', 'RecordTree',
    'decode_kif', 'encode_move', 'encode_moves', 'encode_kif',
]
