"""
Constants, notation glyphs and small helpers shared by the shogiban package.

This module provides:
- Board geometry constants
- Japanese notation glyph tables (files, ranks, players, sentinels)
- Viewer window geometry, colour definitions and default settings
- Coordinate helpers
"""

from typing import Any, Dict

# 盤面の基本設定
BOARD_SIZE = 9

# 座標系と表示関連 (筋は右から 0..8, 段は上から 0..8)
JAPANESE_Y_COORDS = ['一', '二', '三', '四', '五', '六', '七', '八', '九']
Y_COORD_FROM_JP = {v: i for i, v in enumerate(JAPANESE_Y_COORDS)}
ZENKAKU_NUM, HANKAKU_NUM = "１２３４５６７８９", "123456789"
ZENKAKU_FILES = list(ZENKAKU_NUM)
ZEN_TO_HAN_TABLE = str.maketrans(ZENKAKU_NUM, HANKAKU_NUM)

JAPANESE_TURN_SYMBOL = {0: '▲', 1: '△'}
JAPANESE_TURN_NAME = {0: '先手', 1: '後手'}
STAND_ICON = {0: '☗', 1: '☖'}

SAME_SQUARE_SYMBOL = '同　'
DROP_SYMBOL = '打'
PROMOTE_SYMBOL = '成'
NO_PROMOTE_SYMBOL = '不成'
START_TEXT = '開始局面'
END_TEXT = '終了'

# 終局を表す語
GAME_END_WORDS = ['中断', '投了', '持将棋', '千日手', '詰み', '切れ負け',
                  '反則勝ち', '反則負け', '入玉勝ち', '不戦勝', '不戦敗']

# ビューアの盤面とウィンドウ設定
SQUARE = 56
BOARD_PIXEL_WIDTH = SQUARE * BOARD_SIZE
BOARD_PIXEL_HEIGHT = SQUARE * BOARD_SIZE
COORD_MARGIN = 30
WINDOW_PADDING_X = 40
WINDOW_PADDING_Y = 30
HAND_AREA_WIDTH = 70

KIFU_WINDOW_WIDTH = 260
KIFU_ITEM_HEIGHT = 22

BOARD_START_X = WINDOW_PADDING_X + HAND_AREA_WIDTH + COORD_MARGIN
BOARD_START_Y = WINDOW_PADDING_Y + COORD_MARGIN

WIDTH = (BOARD_START_X + BOARD_PIXEL_WIDTH + COORD_MARGIN + HAND_AREA_WIDTH +
         WINDOW_PADDING_X + KIFU_WINDOW_WIDTH + WINDOW_PADDING_X)
HEIGHT = BOARD_START_Y + BOARD_PIXEL_HEIGHT + COORD_MARGIN + WINDOW_PADDING_Y
FPS = 30

# 色の定義
WHITE = (223, 235, 234)
BLACK = (20, 20, 20)
GRAY = (171, 214, 211)
GREEN = (120, 255, 120)
RED = (255, 80, 80)
BLUE = (120, 160, 255)
YELLOW = (240, 220, 90)
TATAMI_GREEN = (140, 164, 138)
DARK_BROWN = (50, 44, 40)
BOARD_COLOR = (187, 155, 82)

# ビューアの既定設定 (main(settings=...) で上書き)
DEFAULT_SETTINGS: Dict[str, Any] = {
    'caption': '将棋盤',
    'font_name': None,
    'font_size': 34,
    'small_font_size': 18,
    'show_legal_moves': True,
}


def in_bounds(x: int, y: int) -> bool:
    """座標が盤面内かチェック"""
    return 0 <= x < BOARD_SIZE and 0 <= y < BOARD_SIZE


def coords_to_kifu(file: int, rank: int) -> str:
    """盤上座標を棋譜記法に変換"""
    return f"{ZENKAKU_FILES[file]}{JAPANESE_Y_COORDS[rank]}"
