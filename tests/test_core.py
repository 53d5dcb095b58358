"""
Unit tests for the core position model and move rules.

Tests essential components:
- Piece kinds, players and promotion maps
- Square / stand addressing and piece stands
- Board setup, moves, captures and editing aids
- Legal destination generation, move legality and promotion
"""

import unittest
import sys
import os

# Add the parent directory to sys.path to import shogiban modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from shogiban.piece import (
    Kind, Player, Piece, STAND_ORDER, PROMOTE_MAP, MOVES,
    promote_kind, demote_kind, flip_kind, is_promotable,
)
from shogiban.board import Board, Square, StandPlace, StandKind, StandIndex, Stand, standard_setup
from shogiban.errors import InvariantError
from shogiban.rules import (
    legal_destinations_from, legal_destinations, is_legal_move,
    is_promotable_move, PROMOTION_ZONE,
)
from shogiban.utils import BOARD_SIZE


def empty_board_with(*placements):
    """Build an empty board holding the given (file, rank, kind, owner) pieces"""
    board = Board()
    for file, rank, kind, owner in placements:
        board.set(Square(file, rank), Piece(kind, owner))
    return board


class TestPiece(unittest.TestCase):
    """Test piece-related functionality"""

    def test_piece_creation(self):
        """Test piece creation and basic properties"""
        piece = Piece(Kind.KING, Player.FIRST)
        self.assertEqual(piece.kind, Kind.KING)
        self.assertEqual(piece.owner, Player.FIRST)
        self.assertFalse(piece.promoted)

    def test_piece_promotion_property(self):
        """Test promoted piece detection"""
        self.assertFalse(Piece(Kind.PAWN, Player.FIRST).promoted)
        self.assertTrue(Piece(Kind.PROMOTED_PAWN, Player.FIRST).promoted)

    def test_piece_equality(self):
        """Pieces compare by kind and owner"""
        self.assertEqual(Piece(Kind.ROOK, Player.SECOND), Piece('R', 1))
        self.assertNotEqual(Piece(Kind.ROOK, Player.SECOND), Piece(Kind.ROOK, Player.FIRST))
        cloned = Piece(Kind.ROOK, Player.SECOND).clone()
        self.assertEqual(cloned, Piece(Kind.ROOK, Player.SECOND))

    def test_demote_kind(self):
        """Test piece demotion"""
        self.assertEqual(demote_kind(Kind.PROMOTED_PAWN), Kind.PAWN)
        self.assertEqual(demote_kind(Kind.PROMOTED_ROOK), Kind.ROOK)
        self.assertEqual(demote_kind(Kind.KING), Kind.KING)

    def test_promote_kind_is_total(self):
        """Every kind maps to a kind; king and gold stay unchanged"""
        for kind in Kind:
            self.assertIn(promote_kind(kind), Kind)
        self.assertEqual(promote_kind(Kind.KING), Kind.KING)
        self.assertEqual(promote_kind(Kind.GOLD), Kind.GOLD)
        self.assertEqual(promote_kind(Kind.PROMOTED_SILVER), Kind.PROMOTED_SILVER)
        self.assertEqual(len(PROMOTE_MAP), 6)

    def test_flip_kind(self):
        self.assertEqual(flip_kind(Kind.SILVER), Kind.PROMOTED_SILVER)
        self.assertEqual(flip_kind(Kind.PROMOTED_SILVER), Kind.SILVER)
        self.assertEqual(flip_kind(Kind.GOLD), Kind.GOLD)

    def test_is_promotable(self):
        self.assertTrue(is_promotable(Kind.PAWN))
        self.assertFalse(is_promotable(Kind.KING))
        self.assertFalse(is_promotable(Kind.GOLD))
        self.assertFalse(is_promotable(Kind.PROMOTED_PAWN))

    def test_player_opponent(self):
        self.assertEqual(Player.FIRST.opponent, Player.SECOND)
        self.assertEqual(Player.SECOND.opponent, Player.FIRST)

    def test_every_kind_has_moves(self):
        for kind in Kind:
            self.assertTrue(MOVES[kind])


class TestAddressing(unittest.TestCase):
    """Test square and stand addresses"""

    def test_square_range(self):
        """Out-of-range coordinates are rejected on construction"""
        Square(0, 0)
        Square(8, 8)
        for file, rank in [(-1, 0), (9, 0), (0, -1), (0, 9)]:
            with self.assertRaises(InvariantError):
                Square(file, rank)

    def test_square_equality(self):
        self.assertEqual(Square(6, 6), Square(6, 6))
        self.assertNotEqual(Square(6, 6), Square(6, 5))
        self.assertEqual(str(Square(6, 6)), '77')

    def test_stand_index_range(self):
        StandIndex(Player.FIRST, len(STAND_ORDER) - 1)
        with self.assertRaises(InvariantError):
            StandIndex(Player.FIRST, len(STAND_ORDER))

    def test_addresses_of_different_shape_are_not_equal(self):
        self.assertNotEqual(StandPlace(Player.FIRST), StandKind(Player.FIRST, Kind.PAWN))
        self.assertNotEqual(StandKind(Player.FIRST, Kind.PAWN), StandIndex(Player.FIRST, 0))


class TestStand(unittest.TestCase):
    """Test piece stand operations"""

    def setUp(self):
        self.stand = Stand()

    def test_push_demotes(self):
        self.stand.push(Kind.PROMOTED_ROOK)
        self.assertTrue(self.stand.has(Kind.ROOK))
        self.assertFalse(self.stand.has(Kind.PROMOTED_ROOK))
        self.assertEqual(self.stand.count(Kind.ROOK), 1)

    def test_push_several(self):
        self.stand.push(Kind.PROMOTED_PAWN, 3)
        self.assertEqual(self.stand.count(Kind.PAWN), 3)
        with self.assertRaises(InvariantError):
            self.stand.push(Kind.PAWN, 0)

    def test_pop(self):
        self.stand.push(Kind.PAWN)
        self.stand.push(Kind.PAWN)
        self.stand.pop(Kind.PAWN)
        self.assertEqual(self.stand.count(Kind.PAWN), 1)
        self.stand.pop(Kind.PAWN)
        self.assertFalse(self.stand.has(Kind.PAWN))
        with self.assertRaises(InvariantError):
            self.stand.pop(Kind.PAWN)

    def test_kind_at_follows_stand_order(self):
        """Ordinal positions skip empty kinds and follow the fixed priority"""
        for kind in [Kind.PAWN, Kind.ROOK, Kind.PAWN, Kind.SILVER]:
            self.stand.push(kind)
        self.assertEqual(self.stand.non_empty_kind_count(), 3)
        self.assertEqual(len(self.stand), 3)
        self.assertEqual(self.stand.kind_at(0), Kind.ROOK)
        self.assertEqual(self.stand.kind_at(1), Kind.SILVER)
        self.assertEqual(self.stand.kind_at(2), Kind.PAWN)
        with self.assertRaises(InvariantError):
            self.stand.kind_at(3)
        with self.assertRaises(InvariantError):
            self.stand.kind_at(-1)

    def test_items_and_total(self):
        self.assertTrue(self.stand.is_empty())
        self.stand.push(Kind.GOLD)
        self.stand.push(Kind.PAWN)
        self.stand.push(Kind.PAWN)
        self.assertEqual(self.stand.items(), [(Kind.GOLD, 1), (Kind.PAWN, 2)])
        self.assertEqual(self.stand.total(), 3)


class TestBoard(unittest.TestCase):
    """Test board-related functionality"""

    def test_standard_setup(self):
        """Test standard board setup"""
        board = standard_setup()

        # King positions
        self.assertEqual(board.get(Square(4, 0)), Piece(Kind.KING, Player.SECOND))
        self.assertEqual(board.get(Square(4, 8)), Piece(Kind.KING, Player.FIRST))
        self.assertEqual(board.get(Square(1, 7)), Piece(Kind.ROOK, Player.FIRST))
        self.assertEqual(board.get(Square(7, 7)), Piece(Kind.BISHOP, Player.FIRST))
        self.assertEqual(board.get(Square(7, 1)), Piece(Kind.ROOK, Player.SECOND))
        self.assertEqual(board.get(Square(1, 1)), Piece(Kind.BISHOP, Player.SECOND))

        # Pawns
        for x in range(BOARD_SIZE):
            self.assertEqual(board.get(Square(x, 2)), Piece(Kind.PAWN, Player.SECOND))
            self.assertEqual(board.get(Square(x, 6)), Piece(Kind.PAWN, Player.FIRST))

    def test_standard_setup_piece_counts(self):
        board = standard_setup()
        for player in Player:
            on_board = [p for _, p in board.pieces() if p.owner == player]
            self.assertEqual(len(on_board), 20)
            self.assertTrue(board.stand(player).is_empty())

    def test_move_to_empty_square(self):
        board = standard_setup()
        board.move(Square(6, 6), Square(6, 5))
        self.assertIsNone(board.get(Square(6, 6)))
        self.assertEqual(board.get(Square(6, 5)), Piece(Kind.PAWN, Player.FIRST))

    def test_move_same_place_is_noop(self):
        board = standard_setup()
        board.move(Square(6, 6), Square(6, 6))
        self.assertEqual(board, standard_setup())

    def test_move_from_empty_square_fails(self):
        board = standard_setup()
        with self.assertRaises(InvariantError):
            board.move(Square(4, 4), Square(4, 3))

    def test_capture_goes_to_movers_stand_demoted(self):
        board = empty_board_with((4, 4, Kind.ROOK, Player.FIRST),
                                 (4, 2, Kind.PROMOTED_PAWN, Player.SECOND))
        board.move(Square(4, 4), Square(4, 2))
        self.assertEqual(board.get(Square(4, 2)), Piece(Kind.ROOK, Player.FIRST))
        self.assertEqual(board.stand(Player.FIRST).count(Kind.PAWN), 1)
        self.assertTrue(board.stand(Player.SECOND).is_empty())
        self.assertEqual(board.count_pieces(Player.FIRST), 2)
        self.assertEqual(board.count_pieces(Player.SECOND), 0)

    def test_drop_from_stand(self):
        board = Board()
        board.stand(Player.FIRST).push(Kind.GOLD)
        board.move(StandKind(Player.FIRST, Kind.GOLD), Square(4, 4))
        self.assertEqual(board.get(Square(4, 4)), Piece(Kind.GOLD, Player.FIRST))
        self.assertTrue(board.stand(Player.FIRST).is_empty())

    def test_drop_by_index(self):
        board = Board()
        board.stand(Player.SECOND).push(Kind.PAWN)
        board.stand(Player.SECOND).push(Kind.BISHOP)
        board.move(StandIndex(Player.SECOND, 1), Square(0, 0))
        self.assertEqual(board.get(Square(0, 0)), Piece(Kind.PAWN, Player.SECOND))
        self.assertEqual(board.stand(Player.SECOND).items(), [(Kind.BISHOP, 1)])

    def test_move_to_stand_place(self):
        """Free editing: a piece can be put on a stand directly"""
        board = empty_board_with((3, 3, Kind.PROMOTED_BISHOP, Player.SECOND))
        board.move(Square(3, 3), StandPlace(Player.FIRST))
        self.assertIsNone(board.get(Square(3, 3)))
        self.assertEqual(board.stand(Player.FIRST).count(Kind.BISHOP), 1)

    def test_resolve_origin(self):
        board = Board()
        self.assertIsNone(board.piece_at(StandKind(Player.FIRST, Kind.PAWN)))
        self.assertIsNone(board.piece_at(StandIndex(Player.FIRST, 0)))
        self.assertFalse(board.can_move(Square(0, 0)))
        board.stand(Player.FIRST).push(Kind.PAWN)
        self.assertEqual(board.piece_at(StandIndex(Player.FIRST, 0)), Piece(Kind.PAWN, Player.FIRST))

    def test_flip_owner_and_promotion(self):
        board = empty_board_with((2, 2, Kind.SILVER, Player.FIRST))
        board.flip_owner(Square(2, 2))
        self.assertEqual(board.get(Square(2, 2)), Piece(Kind.SILVER, Player.SECOND))
        board.flip_promotion(Square(2, 2))
        self.assertEqual(board.get(Square(2, 2)), Piece(Kind.PROMOTED_SILVER, Player.SECOND))
        board.flip_promotion(Square(2, 2))
        self.assertEqual(board.get(Square(2, 2)).kind, Kind.SILVER)
        with self.assertRaises(InvariantError):
            board.flip_owner(Square(5, 5))
        with self.assertRaises(InvariantError):
            board.flip_promotion(Square(5, 5))

    def test_clone_board(self):
        """Test board cloning"""
        original = standard_setup()
        cloned = original.clone()
        self.assertEqual(original, cloned)
        cloned.move(Square(6, 6), Square(6, 5))
        cloned.stand(Player.FIRST).push(Kind.PAWN)
        self.assertNotEqual(original, cloned)
        self.assertTrue(original.stand(Player.FIRST).is_empty())

    def test_text_diagram(self):
        text = str(standard_setup())
        self.assertIn('後手の持駒：なし', text)
        self.assertIn('|v香v桂v銀v金v玉v金v銀v桂v香|一', text)
        self.assertIn('| ・ 角 ・ ・ ・ ・ ・ 飛 ・|八', text)


class TestRules(unittest.TestCase):
    """Test game rules and move generation"""

    def setUp(self):
        """Set up test board"""
        self.board = standard_setup()

    def test_pawn_moves(self):
        """Test pawn movement generation"""
        self.assertEqual(legal_destinations_from(self.board, Square(0, 6)), [Square(0, 5)])
        self.assertEqual(legal_destinations_from(self.board, Square(0, 2)), [Square(0, 3)])

    def test_empty_square_has_no_moves(self):
        self.assertEqual(legal_destinations_from(self.board, Square(4, 4)), [])

    def test_king_moves(self):
        """Test king movement on an empty board"""
        board = empty_board_with((4, 4, Kind.KING, Player.FIRST))
        moves = legal_destinations_from(board, Square(4, 4))
        self.assertEqual(len(moves), 8)
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                if dx or dy:
                    self.assertIn(Square(4 + dx, 4 + dy), moves)

    def test_king_moves_at_edges(self):
        corner = empty_board_with((0, 0, Kind.KING, Player.FIRST))
        self.assertEqual(len(legal_destinations_from(corner, Square(0, 0))), 3)
        edge = empty_board_with((4, 8, Kind.KING, Player.FIRST))
        self.assertEqual(len(legal_destinations_from(edge, Square(4, 8))), 5)

    def test_rook_moves_on_empty_board(self):
        board = empty_board_with((4, 4, Kind.ROOK, Player.FIRST))
        self.assertEqual(len(legal_destinations_from(board, Square(4, 4))), 16)
        corner = empty_board_with((0, 0, Kind.ROOK, Player.SECOND))
        self.assertEqual(len(legal_destinations_from(corner, Square(0, 0))), 16)

    def test_promoted_sliders(self):
        dragon = empty_board_with((4, 4, Kind.PROMOTED_ROOK, Player.FIRST))
        self.assertEqual(len(legal_destinations_from(dragon, Square(4, 4))), 20)
        horse = empty_board_with((4, 4, Kind.PROMOTED_BISHOP, Player.FIRST))
        self.assertEqual(len(legal_destinations_from(horse, Square(4, 4))), 20)

    def test_slider_stops_at_pieces(self):
        """A line stops before an own piece and on an opponent piece"""
        board = empty_board_with((4, 4, Kind.ROOK, Player.FIRST),
                                 (4, 2, Kind.PAWN, Player.FIRST),
                                 (2, 4, Kind.PAWN, Player.SECOND))
        moves = legal_destinations_from(board, Square(4, 4))
        self.assertIn(Square(4, 3), moves)
        self.assertNotIn(Square(4, 2), moves)
        self.assertNotIn(Square(4, 1), moves)
        self.assertIn(Square(3, 4), moves)
        self.assertIn(Square(2, 4), moves)
        self.assertNotIn(Square(1, 4), moves)

    def test_lance_direction_depends_on_owner(self):
        first = empty_board_with((0, 8, Kind.LANCE, Player.FIRST))
        self.assertEqual(len(legal_destinations_from(first, Square(0, 8))), 8)
        second = empty_board_with((0, 8, Kind.LANCE, Player.SECOND))
        self.assertEqual(legal_destinations_from(second, Square(0, 8)), [])

    def test_knight_jumps(self):
        moves = legal_destinations_from(self.board, Square(1, 8))
        self.assertEqual(moves, [])
        board = empty_board_with((4, 4, Kind.KNIGHT, Player.SECOND),
                                 (4, 5, Kind.PAWN, Player.FIRST))
        self.assertEqual(sorted(legal_destinations_from(board, Square(4, 4)), key=str),
                         [Square(3, 6), Square(5, 6)])

    def test_is_legal_move(self):
        self.assertTrue(is_legal_move(self.board, Square(6, 6), Square(6, 5)))
        self.assertFalse(is_legal_move(self.board, Square(6, 6), Square(6, 4)))
        self.assertFalse(is_legal_move(self.board, Square(6, 6), StandPlace(Player.FIRST)))

    def test_drop_legality(self):
        board = standard_setup()
        board.stand(Player.FIRST).push(Kind.PAWN)
        self.assertTrue(is_legal_move(board, StandKind(Player.FIRST, Kind.PAWN), Square(4, 4)))
        self.assertTrue(is_legal_move(board, StandIndex(Player.FIRST, 0), Square(4, 4)))
        self.assertFalse(is_legal_move(board, StandKind(Player.FIRST, Kind.PAWN), Square(4, 6)))
        self.assertFalse(is_legal_move(board, StandKind(Player.FIRST, Kind.GOLD), Square(4, 4)))
        self.assertFalse(is_legal_move(board, StandKind(Player.SECOND, Kind.PAWN), Square(4, 4)))

    def test_drop_destinations(self):
        board = standard_setup()
        self.assertEqual(legal_destinations(board, StandKind(Player.FIRST, Kind.PAWN)), [])
        board.stand(Player.FIRST).push(Kind.PAWN)
        self.assertEqual(len(legal_destinations(board, StandKind(Player.FIRST, Kind.PAWN))), 81 - 40)
        self.assertEqual(legal_destinations(board, Square(0, 6)), [Square(0, 5)])

    def test_promotion_zones(self):
        """Test promotion zone definitions"""
        self.assertEqual(list(PROMOTION_ZONE[Player.FIRST]), [0, 1, 2])
        self.assertEqual(list(PROMOTION_ZONE[Player.SECOND]), [6, 7, 8])

    def test_is_promotable_move(self):
        board = empty_board_with((4, 3, Kind.SILVER, Player.FIRST),
                                 (6, 2, Kind.SILVER, Player.FIRST),
                                 (4, 5, Kind.PAWN, Player.SECOND),
                                 (2, 4, Kind.PAWN, Player.FIRST))
        self.assertTrue(is_promotable_move(board, Square(4, 3), Square(4, 2)))
        self.assertTrue(is_promotable_move(board, Square(6, 2), Square(5, 3)))
        self.assertTrue(is_promotable_move(board, Square(4, 5), Square(4, 6)))
        self.assertFalse(is_promotable_move(board, Square(2, 4), Square(2, 3)))

    def test_king_and_gold_never_promote(self):
        for kind in (Kind.KING, Kind.GOLD, Kind.PROMOTED_PAWN):
            board = empty_board_with((4, 1, kind, Player.FIRST))
            for destination in legal_destinations_from(board, Square(4, 1)):
                self.assertFalse(is_promotable_move(board, Square(4, 1), destination))

    def test_drops_never_promote(self):
        board = Board()
        board.stand(Player.FIRST).push(Kind.PAWN)
        self.assertFalse(is_promotable_move(board, StandKind(Player.FIRST, Kind.PAWN), Square(4, 1)))


if __name__ == '__main__':
    unittest.main(verbosity=2)
