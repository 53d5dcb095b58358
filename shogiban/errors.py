"""
Exception types raised by the shogiban package.

Two kinds of failure exist:
- InvariantError: misuse of the API or a broken record (out-of-range
  coordinates, empty squares, misplaced sentinels). A correct caller never
  sees one.
- NotationError: malformed position or move-log text handed to a decoder.

Illegal move attempts are not errors; they are reported as ``False``.
"""


class ShogiError(Exception):
    """shogiban の例外の基底クラス"""


class InvariantError(ShogiError, AssertionError):
    """不正な呼び出し・記録の不整合"""


class NotationError(ShogiError, ValueError):
    """SFEN / KIF 文字列の解析失敗"""
