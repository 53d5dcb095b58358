"""
KIF move-log notation.

This module provides:
- decode_kif: KIF text -> list of record values (start marker, moves, end marker)
- encode_move: text of one record entry, e.g. "▲７六歩(77)" or "△同　角成(88)"
- encode_moves: the texts of a whole line of play in one pass
- encode_kif: a whole line of play written back as KIF move lines

Variation blocks ("変化：") are skipped; only the main line is decoded.
"""

import logging
import re
from typing import List, Optional, Sequence

from .board import Board, Square, StandKind
from .errors import InvariantError, NotationError
from .piece import Player, JAPANESE_PIECE_NAMES, KIND_FROM_JP
from .record import Marker, Move, RecordValue, apply_value, replay
from .utils import (
    Y_COORD_FROM_JP, ZEN_TO_HAN_TABLE,
    JAPANESE_TURN_SYMBOL, GAME_END_WORDS, SAME_SQUARE_SYMBOL, DROP_SYMBOL,
    PROMOTE_SYMBOL, NO_PROMOTE_SYMBOL, START_TEXT, END_TEXT, coords_to_kifu,
)

logger = logging.getLogger(__name__)

PLAYER_FROM_SYMBOL = {'▲': Player.FIRST, '☗': Player.FIRST,
                      '△': Player.SECOND, '☖': Player.SECOND}
VARIATION_PREFIX = '変化：'
KIF_HEADER = '手数----指手---------消費時間--'
RESIGN_TEXT = '投了'
_ZERO_TIME = '( 0:00/00:00:00)'


def _union(strings: Sequence[str]) -> str:
    # 長いものから並べて最長一致させる
    return '(?:' + '|'.join(re.escape(s) for s in sorted(strings, key=len, reverse=True)) + ')'


_MOVE_RE = re.compile(
    r'^ *(?P<turn>\d+) +'
    rf'(?P<player>{_union(list(PLAYER_FROM_SYMBOL))})?'
    r'(?:'
    rf'(?P<end>{_union(GAME_END_WORDS)})'
    r'|'
    r'(?:(?P<same>同[　 ]*)|(?P<file>[１-９1-9])(?P<rank>[一二三四五六七八九]))'
    rf'(?P<piece>{_union(list(KIND_FROM_JP))})'
    rf'(?P<decoration>{_union([NO_PROMOTE_SYMBOL, DROP_SYMBOL, PROMOTE_SYMBOL])})?'
    r'(?:\((?P<origin>[1-9][1-9])\))?'
    r')'
    r'(?: *\( *\d+:\d+/\d+:\d+:\d+\))?'
    r'\+? *$')


def _parse_origin(text: str) -> Square:
    return Square(int(text[0]) - 1, int(text[1]) - 1)


def decode_kif(text: str) -> List[RecordValue]:
    """KIF 形式の棋譜を解析して手順を返す"""
    lines = text.lstrip('\ufeff').splitlines()
    moves: List[RecordValue] = [Marker.START]
    last_destination: Optional[Square] = None
    # 平手では先手から指すので、直前の手番を後手とみなす
    last_player = Player.SECOND
    last_turn = 0

    i = 0
    while i < len(lines):
        line = lines[i]
        i += 1

        # コメント・指し手コメント
        if line.startswith('#') or line.startswith('*'):
            continue

        match = _MOVE_RE.match(line)
        if match is not None:
            if moves[-1] is Marker.END:
                raise NotationError(f"Move after the end of the game: {line.strip()!r}")

            turn = int(match.group('turn'))
            if turn != last_turn + 1:
                logger.warning("Unexpected move number %d after %d", turn, last_turn)
            last_turn = turn

            symbol = match.group('player')
            player = PLAYER_FROM_SYMBOL[symbol] if symbol else last_player.opponent

            if match.group('end'):
                moves.append(Marker.END)
            else:
                kind = KIND_FROM_JP[match.group('piece')]
                decoration = match.group('decoration')

                if match.group('same'):
                    if last_destination is None:
                        raise NotationError(f"Cannot determine the same destination: {line.strip()!r}")
                    destination = last_destination
                else:
                    file = int(match.group('file').translate(ZEN_TO_HAN_TABLE)) - 1
                    destination = Square(file, Y_COORD_FROM_JP[match.group('rank')])

                if decoration == DROP_SYMBOL:
                    if kind.promoted:
                        raise NotationError(f"Promoted piece cannot be dropped: {line.strip()!r}")
                    origin = StandKind(player, kind)
                elif match.group('origin'):
                    origin = _parse_origin(match.group('origin'))
                else:
                    raise NotationError(f"Origin is not specified: {line.strip()!r}")

                moves.append(Move(player, origin, destination, decoration == PROMOTE_SYMBOL))
                last_destination = destination
            last_player = player
            continue

        # 変化は空行まで読み飛ばす
        if line.startswith(VARIATION_PREFIX):
            logger.debug("Skipping variation block: %s", line.strip())
            while i < len(lines):
                skipped = lines[i]
                i += 1
                if skipped.strip() == '':
                    break

    logger.debug("Decoded %d record entries", len(moves))
    return moves


def _move_body(board: Board, move: Move, previous_destination: Optional[Square]) -> str:
    """手番記号を除いた指し手の表記"""
    piece = board.piece_at(move.origin)
    if piece is None:
        raise InvariantError(f"Piece to be moved is not found at {move.origin!r}")

    if move.destination == previous_destination:
        text = SAME_SQUARE_SYMBOL
    else:
        text = coords_to_kifu(move.destination.file, move.destination.rank)
    text += JAPANESE_PIECE_NAMES[piece.kind]
    if move.is_drop:
        text += DROP_SYMBOL
    if move.promote:
        text += PROMOTE_SYMBOL
    if isinstance(move.origin, Square):
        text += f"({move.origin})"
    return text


def _previous_destination(moves: Sequence[RecordValue], index: int) -> Optional[Square]:
    if index > 0 and isinstance(moves[index - 1], Move):
        return moves[index - 1].destination
    return None


def encode_move(moves: Sequence[RecordValue], index: int) -> str:
    """index 番目の手を棋譜表記にする"""
    value = moves[index]
    if value is Marker.START:
        return START_TEXT
    if value is Marker.END:
        return END_TEXT
    board = replay(moves, index - 1)
    body = _move_body(board, value, _previous_destination(moves, index))
    return JAPANESE_TURN_SYMBOL[value.player] + body


def encode_moves(moves: Sequence[RecordValue]) -> List[str]:
    """手順すべての表記。encode_move と同じ結果を局面1回の再生で求める"""
    texts = []
    board = replay(moves, 0)
    for index, value in enumerate(moves):
        if value is Marker.START:
            texts.append(START_TEXT)
        elif value is Marker.END:
            texts.append(END_TEXT)
        else:
            body = _move_body(board, value, _previous_destination(moves, index))
            texts.append(JAPANESE_TURN_SYMBOL[value.player] + body)
            apply_value(board, moves, index)
    return texts


def encode_kif(moves: Sequence[RecordValue]) -> str:
    """手順を KIF の指し手部分として書き出す"""
    lines = [KIF_HEADER]
    board = replay(moves, 0)
    last_player = Player.SECOND
    for index in range(1, len(moves)):
        value = moves[index]
        if value is Marker.END:
            lines.append(f"{index:>4} {RESIGN_TEXT}")
            break
        body = _move_body(board, value, _previous_destination(moves, index))
        # 手番が交互でないときだけ手番記号を書く
        if value.player != last_player.opponent:
            body = JAPANESE_TURN_SYMBOL[value.player] + body
        lines.append(f"{index:>4} {body}   {_ZERO_TIME}")
        apply_value(board, moves, index)
        last_player = value.player
    return '\n'.join(lines) + '\n'
