"""
pygame board viewer for a shogi game record.

This module provides:
- Board, piece and piece-stand drawing onto any pygame Surface
- Hit-testing of board squares and stand slots
- Record browsing (step through the selected line) and move entry with a
  promotion dialog
- Entry point: python -m shogiban.main [record.kif]

The viewer only talks to the engine through Record and the rules queries.
"""

import logging
import sys
from typing import Any, Dict, List, Optional, Tuple

import pygame

from .board import Board, Square, Stand, StandIndex, Origin
from .errors import NotationError
from .piece import Player, STAND_ORDER, SHORT_PIECE_NAMES, JAPANESE_PIECE_NAMES
from .record import Record, Move
from .sfen import decode_sfen
from . import rules
from .utils import (
    WIDTH, HEIGHT, FPS, BOARD_SIZE, SQUARE, BOARD_START_X, BOARD_START_Y,
    BOARD_PIXEL_WIDTH, BOARD_PIXEL_HEIGHT, COORD_MARGIN, WINDOW_PADDING_X,
    HAND_AREA_WIDTH, KIFU_WINDOW_WIDTH, KIFU_ITEM_HEIGHT, WINDOW_PADDING_Y,
    WHITE, BLACK, GRAY, GREEN, RED, BLUE, YELLOW, TATAMI_GREEN, DARK_BROWN,
    BOARD_COLOR, JAPANESE_Y_COORDS, ZENKAKU_FILES, STAND_ICON, DEFAULT_SETTINGS,
)

logger = logging.getLogger(__name__)

Fonts = Dict[str, pygame.font.Font]

KIFU_AREA_X = BOARD_START_X + BOARD_PIXEL_WIDTH + COORD_MARGIN + HAND_AREA_WIDTH + WINDOW_PADDING_X


def load_fonts(settings: Dict[str, Any]) -> Fonts:
    """フォントを読み込む。失敗時はシステムフォントにフォールバック"""
    size, small = settings['font_size'], settings['small_font_size']
    name = settings.get('font_name')
    if name:
        try:
            return {'piece': pygame.font.Font(name, size), 'small': pygame.font.Font(name, small)}
        except (pygame.error, OSError) as e:
            print(f"フォントの読み込みに失敗しました: {name} - {e}")
    fallback = "notosanscjkjp,notosansjp,ipagothic,msmincho,yumincho"
    return {'piece': pygame.font.SysFont(fallback, size),
            'small': pygame.font.SysFont(fallback, small)}


# ----------------------
# 座標変換と当たり判定
# ----------------------
def square_rect(square: Square) -> pygame.Rect:
    """マスの画面上の矩形 (9筋が左端)"""
    x = BOARD_START_X + (BOARD_SIZE - 1 - square.file) * SQUARE
    y = BOARD_START_Y + square.rank * SQUARE
    return pygame.Rect(x, y, SQUARE, SQUARE)


def square_at(x: int, y: int) -> Optional[Square]:
    """画面座標から盤上のマスを求める"""
    if not (BOARD_START_X <= x < BOARD_START_X + BOARD_PIXEL_WIDTH and
            BOARD_START_Y <= y < BOARD_START_Y + BOARD_PIXEL_HEIGHT):
        return None
    gx, gy = (x - BOARD_START_X) // SQUARE, (y - BOARD_START_Y) // SQUARE
    return Square(BOARD_SIZE - 1 - gx, gy)


def stand_rect(player: Player) -> pygame.Rect:
    """駒台の矩形 (先手は右下、後手は左上)"""
    height = len(STAND_ORDER) * SQUARE
    if player == Player.FIRST:
        return pygame.Rect(BOARD_START_X + BOARD_PIXEL_WIDTH + COORD_MARGIN,
                           BOARD_START_Y + BOARD_PIXEL_HEIGHT - height, HAND_AREA_WIDTH, height)
    return pygame.Rect(WINDOW_PADDING_X, BOARD_START_Y, HAND_AREA_WIDTH, height)


def _slot_rect(player: Player, slot: int) -> pygame.Rect:
    rect = stand_rect(player)
    if player == Player.FIRST:
        # 先手は下から積む
        return pygame.Rect(rect.x, rect.bottom - (slot + 1) * SQUARE, rect.width, SQUARE)
    return pygame.Rect(rect.x, rect.y + slot * SQUARE, rect.width, SQUARE)


def stand_index_at(player: Player, x: int, y: int, stand: Stand) -> Optional[StandIndex]:
    """画面座標から駒台上の駒を求める"""
    for slot in range(stand.non_empty_kind_count()):
        if _slot_rect(player, slot).collidepoint(x, y):
            return StandIndex(player, slot)
    return None


def origin_rect(origin: Origin, board: Board) -> Optional[pygame.Rect]:
    if isinstance(origin, Square):
        return square_rect(origin)
    if isinstance(origin, StandIndex):
        return _slot_rect(origin.player, origin.index)
    kinds = [k for k, _ in board.stand(origin.player).items()]
    if origin.kind in kinds:
        return _slot_rect(origin.player, kinds.index(origin.kind))
    return None


# ----------------------
# 描画
# ----------------------
def draw_board_programmatically(screen: pygame.Surface, fonts: Fonts) -> None:
    """盤面をプログラムで描画"""
    margin_rect = pygame.Rect(BOARD_START_X - COORD_MARGIN, BOARD_START_Y - COORD_MARGIN,
                              BOARD_PIXEL_WIDTH + COORD_MARGIN * 2,
                              BOARD_PIXEL_HEIGHT + COORD_MARGIN * 2)
    pygame.draw.rect(screen, BOARD_COLOR, margin_rect)

    for i in range(BOARD_SIZE + 1):
        line_width = 2 if i in [0, BOARD_SIZE] else 1
        # 縦線
        pygame.draw.line(screen, BLACK,
                         (BOARD_START_X + i * SQUARE, BOARD_START_Y),
                         (BOARD_START_X + i * SQUARE, BOARD_START_Y + BOARD_PIXEL_HEIGHT),
                         line_width)
        # 横線
        pygame.draw.line(screen, BLACK,
                         (BOARD_START_X, BOARD_START_Y + i * SQUARE),
                         (BOARD_START_X + BOARD_PIXEL_WIDTH, BOARD_START_Y + i * SQUARE),
                         line_width)

    # 座標表示 (上に筋、右に段)
    for i in range(BOARD_SIZE):
        num_text = fonts['small'].render(ZENKAKU_FILES[BOARD_SIZE - 1 - i], True, BLACK)
        screen.blit(num_text, num_text.get_rect(
            center=(BOARD_START_X + i * SQUARE + SQUARE // 2, BOARD_START_Y - COORD_MARGIN // 2)))
        kanji_text = fonts['small'].render(JAPANESE_Y_COORDS[i], True, BLACK)
        screen.blit(kanji_text, kanji_text.get_rect(
            center=(BOARD_START_X + BOARD_PIXEL_WIDTH + COORD_MARGIN // 2,
                    BOARD_START_Y + i * SQUARE + SQUARE // 2)))


def _draw_glyph(screen: pygame.Surface, font: pygame.font.Font, text: str,
                owner: Player, rect: pygame.Rect) -> None:
    surf = font.render(text, True, BLACK)
    if owner == Player.SECOND:
        surf = pygame.transform.rotate(surf, 180)
    screen.blit(surf, surf.get_rect(center=rect.center))


def draw_stand(screen: pygame.Surface, fonts: Fonts, player: Player, stand: Stand) -> None:
    """駒台を描画"""
    rect = stand_rect(player)
    pygame.draw.rect(screen, DARK_BROWN, rect)
    icon = fonts['small'].render(STAND_ICON[player], True, WHITE)
    icon_y = rect.bottom + 12 if player == Player.FIRST else rect.top - 12
    screen.blit(icon, icon.get_rect(center=(rect.centerx, icon_y)))

    for slot, (kind, num) in enumerate(stand.items()):
        slot_rect = _slot_rect(player, slot)
        inner = slot_rect.inflate(-6, -6)
        pygame.draw.rect(screen, BOARD_COLOR, inner)
        _draw_glyph(screen, fonts['piece'], JAPANESE_PIECE_NAMES[kind], player, inner)
        if num > 1:
            count = fonts['small'].render(str(num), True, WHITE)
            screen.blit(count, (slot_rect.right - count.get_width() - 2, slot_rect.bottom - count.get_height()))


def draw_position(screen: pygame.Surface, board: Board, fonts: Fonts,
                  last_move: Optional[Square] = None, selected: Optional[Origin] = None,
                  highlights: Tuple[Square, ...] = ()) -> None:
    """局面全体 (盤・駒・駒台・ハイライト) を描画"""
    draw_board_programmatically(screen, fonts)

    if last_move is not None:
        pygame.draw.rect(screen, YELLOW, square_rect(last_move).inflate(-2, -2))

    for square in highlights:
        color = RED if board.get(square) else GREEN
        pygame.draw.rect(screen, color, square_rect(square), 3)

    for square, piece in board.pieces():
        _draw_glyph(screen, fonts['piece'], SHORT_PIECE_NAMES[piece.kind], piece.owner,
                    square_rect(square))

    for player in (Player.FIRST, Player.SECOND):
        draw_stand(screen, fonts, player, board.stand(player))

    if selected is not None:
        rect = origin_rect(selected, board)
        if rect is not None:
            pygame.draw.rect(screen, BLUE, rect, 3)


def kifu_lines(record: Record) -> List[str]:
    """棋譜リストの各行 (手数, 分岐の印, 指し手)"""
    return [f"{i:>3}{'+' if branch else ' '}{text}"
            for i, (text, branch) in enumerate(zip(record.move_texts(), record.branch_points()))]


def draw_kifu(screen: pygame.Surface, fonts: Fonts, lines: List[str], index: int) -> None:
    """棋譜リストを描画 (現在の手を強調)"""
    area = pygame.Rect(KIFU_AREA_X, WINDOW_PADDING_Y, KIFU_WINDOW_WIDTH, HEIGHT - WINDOW_PADDING_Y * 2)
    pygame.draw.rect(screen, WHITE, area)
    pygame.draw.rect(screen, BLACK, area, 2)

    max_lines = area.height // KIFU_ITEM_HEIGHT
    start = max(0, min(index - max_lines // 2, len(lines) - max_lines))
    for i in range(start, min(len(lines), start + max_lines)):
        y = area.y + (i - start) * KIFU_ITEM_HEIGHT
        if i == index:
            pygame.draw.rect(screen, GRAY, (area.x + 2, y, area.width - 4, KIFU_ITEM_HEIGHT))
        text = fonts['small'].render(lines[i], True, BLACK)
        screen.blit(text, (area.x + 8, y + 2))


def ask_promotion(screen: pygame.Surface, fonts: Fonts) -> bool:
    """成りの選択ダイアログを表示"""
    dialog = pygame.Surface((300, 150))
    dialog.fill(GRAY)
    dialog_rect = dialog.get_rect(center=(WIDTH // 2, HEIGHT // 2))
    pygame.draw.rect(dialog, BLACK, dialog.get_rect(), 3)

    title = fonts['small'].render("成りますか?", True, BLACK)
    dialog.blit(title, title.get_rect(center=(dialog.get_width() // 2, 40)))

    yes_rect, no_rect = pygame.Rect(50, 80, 80, 40), pygame.Rect(170, 80, 80, 40)
    pygame.draw.rect(dialog, GREEN, yes_rect)
    pygame.draw.rect(dialog, RED, no_rect)
    dialog.blit(fonts['small'].render("成る", True, BLACK), (70, 90))
    dialog.blit(fonts['small'].render("不成", True, BLACK), (190, 90))

    screen.blit(dialog, dialog_rect.topleft)
    pygame.display.flip()

    while True:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                pygame.quit()
                sys.exit()
            elif event.type == pygame.MOUSEBUTTONDOWN:
                if yes_rect.move(dialog_rect.topleft).collidepoint(event.pos):
                    return True
                elif no_rect.move(dialog_rect.topleft).collidepoint(event.pos):
                    return False


# ----------------------
# 状態とイベント処理
# ----------------------
class ViewerState:
    """ビューアの状態 (棋譜・表示中の手数・選択中の駒)"""

    def __init__(self, record: Record, board: Optional[Board] = None):
        self.record = record
        self.index = len(record) - 1
        self.selected: Optional[Origin] = None
        self.legal_moves: List[Square] = []
        # SFEN で読み込んだ局面は閲覧のみ
        self.fixed_board = board
        # 局面は手数が変わったとき、棋譜リストは手が加わったときだけ作り直す
        self.kifu_lines: List[str] = []
        self._board: Optional[Board] = board
        self._last_move: Optional[Square] = None
        self._refresh_kifu()
        self._refresh_board()

    def _refresh_kifu(self) -> None:
        if self.fixed_board is None:
            self.kifu_lines = kifu_lines(self.record)

    def _refresh_board(self) -> None:
        if self.fixed_board is not None:
            return
        self._board = self.record.get_position_at(self.index)
        value = self.record.view()[self.index]
        self._last_move = value.destination if isinstance(value, Move) else None

    def current_board(self) -> Board:
        return self._board

    def last_move(self) -> Optional[Square]:
        return self._last_move

    def step(self, delta: int) -> None:
        index = max(0, min(self.index + delta, len(self.record) - 1))
        if index != self.index:
            self.index = index
            self._refresh_board()
        self.clear_selection()

    def clear_selection(self) -> None:
        self.selected, self.legal_moves = None, []

    def select(self, origin: Origin, show_legal_moves: bool = True) -> None:
        self.selected = origin
        self.legal_moves = rules.legal_destinations(self._board, origin) if show_legal_moves else []

    def click(self, x: int, y: int, promotion_chooser, show_legal_moves: bool = True) -> bool:
        """クリック処理。手が追加されたら True"""
        if self.fixed_board is not None:
            return False
        board = self.current_board()
        square = square_at(x, y)

        if self.selected is not None and square is not None:
            origin = self.selected
            if self.record.try_adding_legal_move(self.index, origin, square, promotion_chooser):
                self.index += 1
                self._refresh_kifu()
                self._refresh_board()
                logger.info("%s", self.kifu_lines[self.index].strip())
                self.clear_selection()
                return True

        if square is not None and board.can_move(square):
            self.select(square, show_legal_moves)
            return False
        for player in (Player.FIRST, Player.SECOND):
            hit = stand_index_at(player, x, y, board.stand(player))
            if hit is not None:
                self.select(hit, show_legal_moves)
                return False
        self.clear_selection()
        return False


def _handle_events(screen: pygame.Surface, state: ViewerState, fonts: Fonts,
                   settings: Dict[str, Any]) -> bool:
    """イベント処理。終了要求で False"""
    for event in pygame.event.get():
        if event.type == pygame.QUIT:
            return False
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_LEFT:
                state.step(-1)
            elif event.key == pygame.K_RIGHT:
                state.step(1)
            elif event.key == pygame.K_HOME:
                state.step(-len(state.record))
            elif event.key == pygame.K_END:
                state.step(len(state.record))
            elif event.key == pygame.K_ESCAPE:
                state.clear_selection()
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            mx, my = event.pos
            state.click(mx, my, lambda: ask_promotion(screen, fonts), settings['show_legal_moves'])
    return True


def draw_game_elements(screen: pygame.Surface, state: ViewerState, fonts: Fonts) -> None:
    """画面全体を描画"""
    screen.fill(TATAMI_GREEN)
    draw_position(screen, state.current_board(), fonts, state.last_move(),
                  state.selected, tuple(state.legal_moves))
    if state.fixed_board is None:
        draw_kifu(screen, fonts, state.kifu_lines, state.index)


def main(kif_text: Optional[str] = None, sfen_text: Optional[str] = None,
         settings: Optional[Dict[str, Any]] = None) -> None:
    """メイン関数"""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    settings = {**DEFAULT_SETTINGS, **(settings or {})}

    record = Record.from_kif(kif_text) if kif_text else Record()
    board = decode_sfen(sfen_text) if sfen_text else None
    if board is not None:
        logger.debug("SFEN position:\n%s", board)
    state = ViewerState(record, board)

    pygame.init()
    screen = pygame.display.set_mode((WIDTH, HEIGHT))
    pygame.display.set_caption(settings['caption'])
    fonts = load_fonts(settings)
    clock = pygame.time.Clock()

    running = True
    while running:
        running = _handle_events(screen, state, fonts, settings)
        draw_game_elements(screen, state, fonts)
        pygame.display.flip()
        clock.tick(FPS)
    pygame.quit()


def _read_argument(path: str) -> Dict[str, str]:
    """引数のファイル (KIF) または SFEN 文字列を読み込む"""
    if path.endswith('.kif') or path.endswith('.kifu'):
        encoding = 'utf-8' if path.endswith('.kifu') else 'cp932'
        try:
            with open(path, 'r', encoding=encoding) as f:
                return {'kif_text': f.read()}
        except UnicodeDecodeError:
            with open(path, 'r', encoding='utf-8') as f:
                return {'kif_text': f.read()}
    return {'sfen_text': path}


def run() -> None:
    """コマンドライン起動"""
    kwargs = _read_argument(sys.argv[1]) if len(sys.argv) > 1 else {}
    try:
        main(**kwargs)
    except NotationError as e:
        print(f"棋譜を読み込めませんでした: {e}")
        sys.exit(1)


if __name__ == "__main__":
    run()
