#!/usr/bin/env python3
"""
Crucible Viewer: step through the run-length constrained search

- Keyboard:
    [1]/[2]/[3]  -> switch map
    [D]/[A]      -> heuristic off (Dijkstra order) / on (A* order)
    [P]          -> toggle run limits: part one (0..3) / part two (4..10)
    [SPACE]      -> run/pause
    [N]          -> single step
    [R]          -> reset
    [+]/[-]      -> steps/sec
    [Q]/[ESC]    -> quit

Settings come from crucible.config (CRUCIBLE_* env, --key=value argv).
A map path given on the command line replaces the bundled default.
"""

import logging
import sys
import time
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pygame

from crucible.config import Settings, configure_logging, resolve_settings
from crucible.core.crucible_search import PathCostEngine
from crucible.core.errors import CrucibleError, SearchAborted
from crucible.core.grid_io import MapSpec, load_any, load_map
from crucible.core.queries import PART_ONE, PART_TWO
from crucible.core.types import Grid, Location, StepResult

logger = logging.getLogger(__name__)

# ---------- Config ----------
MAP_DIR = Path(__file__).resolve().parents[2] / "maps"
MAP_FILES = {
    "01_lava_pool":      MAP_DIR / "01_lava_pool.json",
    "02_ultra_pool":     MAP_DIR / "02_ultra_pool.json",
    "03_ultra_corridor": MAP_DIR / "03_ultra_corridor.json",
}
PANEL_W = 420            # right band: metrics + buttons
GRID_MARGIN = 16
CELL_SIZE_DEFAULT = 36
FONT_NAME = None  # default pygame font

# Colors
WHITE       = (255,255,255)
BLACK       = (  0,  0,  0)
BLUE        = ( 70,130,180)
RED         = (220, 50, 47)
COOL        = ( 60, 64, 72)    # cost 0
HOT         = (255,120, 20)    # cost 9
NEON_CYAN_A = (0,150,255,110)
NEON_MAG_A  = (255,0,120,90)
NEON_MINT   = (0,255,200)

CARD_BG     = (24,28,36,220)
CARD_HI     = (255,255,255,18)
TEXT_LIGHT  = (230,235,240)
ACCENT_GOLD = (255,210,0)


def cost_color(cost: int, max_cost: int = 9) -> Tuple[int, int, int]:
    """Linear blend COOL -> HOT by cost."""
    t = 0.0 if max_cost <= 0 else max(0.0, min(1.0, cost / max_cost))
    return tuple(int(a + (b - a) * t) for a, b in zip(COOL, HOT))


# ---------- Panel button ----------
class PanelButton:
    """Rounded panel button; `lit` marks the selected choice of a group."""

    FILL = (36, 40, 48, 220)
    FILL_LIT = (58, 86, 160, 235)
    EDGE_LIT = (120, 170, 255)

    def __init__(self, label: str, rect: pygame.Rect, on_click):
        self.label = label
        self.rect = rect
        self.on_click = on_click
        self.lit = False

    def draw(self, screen: pygame.Surface, font: pygame.font.Font):
        plate = pygame.Surface(self.rect.size, pygame.SRCALPHA)
        pygame.draw.rect(plate, self.FILL_LIT if self.lit else self.FILL, plate.get_rect(), border_radius=10)
        screen.blit(plate, self.rect.topleft)
        if self.lit:
            pygame.draw.rect(screen, self.EDGE_LIT, self.rect, width=2, border_radius=10)
        label = font.render(self.label, True, TEXT_LIGHT)
        screen.blit(label, label.get_rect(center=self.rect.center))

    def click(self, pos) -> bool:
        if self.rect.collidepoint(pos):
            self.on_click()
            return True
        return False


# ---------- Viewer ----------
class Viewer:
    def __init__(self, spec: MapSpec, settings: Optional[Settings] = None):
        pygame.init()

        self.spec = spec
        self.settings = settings or Settings()
        self.font_small = pygame.font.Font(FONT_NAME, 14)
        self.font = pygame.font.Font(FONT_NAME, 18)
        self.font_big = pygame.font.Font(FONT_NAME, 22)

        self.cell_size = self._auto_cell_size(spec.grid)
        grid_px_w = GRID_MARGIN*2 + spec.grid.cols * self.cell_size
        grid_px_h = GRID_MARGIN*2 + spec.grid.rows * self.cell_size
        win_w = grid_px_w + PANEL_W
        win_h = max(grid_px_h, 620)

        self.screen = pygame.display.set_mode((win_w, win_h), pygame.RESIZABLE)
        pygame.display.set_caption(f"Crucible — {spec.name}")

        self._buttons: List[PanelButton] = []
        self._lit_rules: Dict = {}
        self.open_set: set = set()
        self.closed_set: set = set()
        self.path: List[Location] = []

        self.running = False
        self.clock = pygame.time.Clock()
        self.steps_per_sec = 30
        self.state = "Idle"
        self.selected_map_key = self._infer_map_key()
        self.use_heuristic = self.settings.use_heuristic
        self.limits = self._default_limits()
        self._last_step_t = 0.0

        self._layout(win_w, win_h)
        self.algo = self._make_algo()
        self._reset_overlays()

    # ---------- layout ----------
    def _layout(self, win_w: int, win_h: int):
        """Compute integer cell_size that fits window and place the grid left of the panel."""
        grid = self.spec.grid
        avail_w = max(1, win_w - PANEL_W - 2 * GRID_MARGIN)
        avail_h = max(1, win_h - 2 * GRID_MARGIN)
        self.cell_size = int(max(8, min(avail_w // grid.cols, avail_h // grid.rows)))

        plate_w = grid.cols * self.cell_size + 2 * GRID_MARGIN
        plate_h = grid.rows * self.cell_size + 2 * GRID_MARGIN
        top_y = max(0, (win_h - plate_h) // 2)
        self.canvas_rect = pygame.Rect(0, top_y, plate_w, plate_h)
        self._grid_origin = (self.canvas_rect.x + GRID_MARGIN, self.canvas_rect.y + GRID_MARGIN)
        self._right_band = pygame.Rect(self.canvas_rect.right, 0,
                                       max(PANEL_W, win_w - self.canvas_rect.right), win_h)
        self._build_buttons()

    def _auto_cell_size(self, grid: Grid) -> int:
        target_h = 720 - GRID_MARGIN*2
        return max(10, min(CELL_SIZE_DEFAULT, target_h // grid.rows))

    def _infer_map_key(self) -> str:
        for k, p in MAP_FILES.items():
            try:
                other = load_map(p)
            except (CrucibleError, OSError):
                continue
            if other.grid == self.spec.grid and (other.min_run, other.max_run) == (self.spec.min_run, self.spec.max_run):
                return k
        return "custom"

    def _default_limits(self) -> Tuple[int, int]:
        lo = self.spec.min_run if self.spec.min_run is not None else PART_ONE[0]
        hi = self.spec.max_run if self.spec.max_run is not None else PART_ONE[1]
        return (lo, hi)

    # ---------- algorithm ----------
    def _make_algo(self) -> PathCostEngine:
        algo = PathCostEngine(
            min_run=self.limits[0],
            max_run=self.limits[1],
            origin=self.spec.start,
            destination=self.spec.goal,
            cache_key=self.settings.cache_key,
            early_exit=self.settings.early_exit,
            use_heuristic=self.use_heuristic,
            max_expansions=self.settings.max_expansions,
            name="A*" if self.use_heuristic else "Dijkstra",
        )
        algo.init(self.spec.grid)
        return algo

    def run(self):
        while True:
            self._handle_events()
            if self.running:
                self._tick_algorithm()
            self._draw()
            self.clock.tick(60)

    def _tick_algorithm(self):
        t0 = time.time()
        if t0 - self._last_step_t >= 1.0 / max(1, self.steps_per_sec):
            self._last_step_t = t0
            self._do_step()

    def _do_step(self):
        try:
            res: StepResult = self.algo.step()
        except SearchAborted as ex:
            logger.warning("[Viewer] %s: %s", self.spec.name, ex)
            self.state = "Aborted"; self.running = False
            self._refresh_active_states()
            return
        for c in res.opened: self.open_set.add(c)
        for c in res.closed:
            self.closed_set.add(c)
            self.open_set.discard(c)
        if res.path is not None: self.path = res.path
        if res.status == "done":
            self.state = "Done"; self.running = False
            logger.info("[Viewer] %s done, cost %s", self.spec.name, res.metrics.get("total_cost"))
        elif res.status == "no_path":
            self.state = "No path"; self.running = False
        elif res.status in ("running", "idle"):
            self.state = "Running" if self.running else "Paused"
        if res.metrics:
            self._last_metrics = res.metrics
        self._refresh_active_states()

    # ---------- events ----------
    def _handle_events(self):
        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                pygame.quit(); sys.exit(0)
            elif e.type == pygame.KEYDOWN:
                if e.key in (pygame.K_ESCAPE, pygame.K_q):
                    pygame.quit(); sys.exit(0)
                elif e.key == pygame.K_SPACE:
                    self._toggle_run()
                elif e.key == pygame.K_r:
                    self._reset()
                elif e.key == pygame.K_n:
                    self._do_step()
                elif e.key in (pygame.K_PLUS, pygame.K_EQUALS):
                    self._bump_speed(+5)
                elif e.key in (pygame.K_MINUS, pygame.K_UNDERSCORE):
                    self._bump_speed(-5)
                elif e.key == pygame.K_1:
                    self._switch_map("01_lava_pool")
                elif e.key == pygame.K_2:
                    self._switch_map("02_ultra_pool")
                elif e.key == pygame.K_3:
                    self._switch_map("03_ultra_corridor")
                elif e.key == pygame.K_d:
                    self._switch_heuristic(False)
                elif e.key == pygame.K_a:
                    self._switch_heuristic(True)
                elif e.key == pygame.K_p:
                    self._switch_limits(PART_TWO if self.limits == PART_ONE else PART_ONE)
            elif e.type == pygame.VIDEORESIZE:
                self.screen = pygame.display.set_mode((max(640, e.w), max(480, e.h)), pygame.RESIZABLE)
                self._layout(*self.screen.get_size())
            elif e.type == pygame.MOUSEBUTTONDOWN and e.button == 1:
                for b in self._buttons:
                    if b.click(e.pos):
                        break

    def _switch_map(self, key: str):
        if key not in MAP_FILES: return
        try:
            self.spec = load_map(MAP_FILES[key])
        except (CrucibleError, OSError) as ex:
            logger.error("[Viewer] failed to load map %s: %s", key, ex)
            return
        self.selected_map_key = key
        self.limits = self._default_limits()
        pygame.display.set_caption(f"Crucible — {self.spec.name}")
        self._layout(*self.screen.get_size())
        self._reset()

    def _switch_heuristic(self, on: bool):
        self.use_heuristic = on
        self._reset()

    def _switch_limits(self, limits: Tuple[int, int]):
        self.limits = limits
        self._reset()

    def _reset_overlays(self):
        self.open_set.clear()
        self.closed_set.clear()
        self.path = []
        self._last_metrics: Dict = {
            "algo": self.algo.name,
            "popped": 0,
            "open_size": len(self.algo.frontier),
            "closed_count": 0,
            "cache_size": len(self.algo.cache),
            "pruned": 0,
            "path_len": 0,
            "total_cost": None,
        }

    def _reset(self):
        self.running = False
        self.state = "Idle"
        self.algo = self._make_algo()
        self._reset_overlays()
        self._refresh_active_states()

    def _toggle_run(self):
        if self.state in ("Done", "No path", "Aborted"):
            return
        self.running = not self.running
        self.state = "Running" if self.running else "Paused"
        self._refresh_active_states()

    def _bump_speed(self, dv: int):
        self.steps_per_sec = int(max(1, min(240, self.steps_per_sec + dv)))

    # ---------- drawing ----------
    def _draw(self):
        self._draw_backdrop()
        self._draw_grid()
        self._draw_metrics_and_buttons()
        pygame.display.flip()

    def _draw_backdrop(self):
        w, h = self.screen.get_size()
        top = (24, 26, 32); bot = (36, 40, 48)
        for y in range(h):
            t = y / max(1, h-1)
            c = tuple(int(a + (b - a) * t) for a, b in zip(top, bot))
            pygame.draw.line(self.screen, c, (0, y), (w, y))

    def _cell_rect(self, loc: Location) -> pygame.Rect:
        cs = self.cell_size
        ox, oy = self._grid_origin
        row, col = loc
        return pygame.Rect(ox + col*cs, oy + row*cs, cs, cs)

    def _draw_grid(self):
        cs = self.cell_size
        grid = self.spec.grid
        hi = max(9, max(max(r) for r in grid.cells))
        show_digits = cs >= 18

        for row in range(grid.rows):
            for col in range(grid.cols):
                v = grid.cells[row][col]
                rect = self._cell_rect((row, col))
                pygame.draw.rect(self.screen, cost_color(v, hi), rect)
                pygame.draw.rect(self.screen, BLACK, rect, 1)
                if show_digits:
                    txt = self.font_small.render(str(v), True, TEXT_LIGHT)
                    self.screen.blit(txt, txt.get_rect(center=rect.center))

        # overlays
        for loc in self.closed_set:
            s = pygame.Surface((cs, cs), pygame.SRCALPHA); s.fill(NEON_MAG_A)
            self.screen.blit(s, self._cell_rect(loc).topleft)

        for loc in self.open_set:
            s = pygame.Surface((cs, cs), pygame.SRCALPHA); s.fill(NEON_CYAN_A)
            self.screen.blit(s, self._cell_rect(loc).topleft)

        # path
        if len(self.path) >= 2:
            pts = [self._cell_rect(loc).center for loc in self.path]
            pygame.draw.lines(self.screen, NEON_MINT, False, pts, 4)

        self._draw_badge(self.algo.start_cell, BLUE, "S")
        self._draw_badge(self.algo.goal_cell, RED, "G")

    def _draw_badge(self, loc: Location, color: Tuple[int, int, int], label: str):
        rect = self._cell_rect(loc)
        pygame.draw.circle(self.screen, color, rect.center, max(6, self.cell_size//2 - 3))
        txt = self.font_small.render(label, True, WHITE)
        self.screen.blit(txt, txt.get_rect(center=rect.center))

    # ---------- buttons + metrics ----------
    def _build_buttons(self):
        # (label, action, lit-when); lit-when None means a plain action
        specs = [
            ("Run / Pause",            self._toggle_run,                       lambda: self.running),
            ("Step Once",              self._do_step,                          None),
            ("Reset",                  self._reset,                            None),
            ("Order: Dijkstra",        lambda: self._switch_heuristic(False),  lambda: not self.use_heuristic),
            ("Order: A*",              lambda: self._switch_heuristic(True),   lambda: self.use_heuristic),
            ("Runs: part one (0..3)",  lambda: self._switch_limits(PART_ONE),  lambda: self.limits == PART_ONE),
            ("Runs: part two (4..10)", lambda: self._switch_limits(PART_TWO),  lambda: self.limits == PART_TWO),
        ]
        rb = self._right_band
        w = max(160, rb.width - 32)
        h, gap = 34, 8
        self._buttons = []
        self._lit_rules = {}
        for i, (label, action, lit) in enumerate(specs):
            btn = PanelButton(label, pygame.Rect(rb.x + 16, rb.y + 300 + i * (h + gap), w, h), action)
            self._buttons.append(btn)
            if lit is not None:
                self._lit_rules[label] = lit
        self._refresh_active_states()

    def button(self, label: str) -> PanelButton:
        return next(b for b in self._buttons if b.label == label)

    def _refresh_active_states(self):
        for b in self._buttons:
            rule = self._lit_rules.get(b.label)
            b.lit = bool(rule()) if rule else False

    def _draw_metrics_and_buttons(self):
        rb = self._right_band

        card = pygame.Surface((rb.width - 20, 280), pygame.SRCALPHA)
        pygame.draw.rect(card, CARD_BG, card.get_rect(), border_radius=14)
        band = pygame.Surface((card.get_width(), 24), pygame.SRCALPHA)
        pygame.draw.rect(band, CARD_HI, band.get_rect(), border_radius=14)
        card.blit(band, (0,0))
        self.screen.blit(card, (rb.x + 10, rb.y + 10))

        x0 = rb.x + 24
        y0 = rb.y + 18

        def line(text, big=False, color=TEXT_LIGHT):
            nonlocal y0
            f = self.font_big if big else self.font
            surf = f.render(text, True, color)
            self.screen.blit(surf, (x0, y0))
            y0 += surf.get_height() + 6

        m = self._last_metrics
        line("Metrics", big=True, color=ACCENT_GOLD)
        line(f"Popped: {m.get('popped', 0)}")
        line(f"Frontier: {m.get('open_size', 0)}")
        line(f"Cache entries: {m.get('cache_size', 0)}")
        line(f"Pruned: {m.get('pruned', 0)}")
        cost = m.get("total_cost")
        line(f"Best cost: {cost if cost is not None else '-'}")
        line("-" * 26)
        line(f"{self.spec.name}  [{self.state}]")
        line(f"Order: {self.algo.name}   Runs: {self.limits[0]}..{self.limits[1]}")
        line(f"Speed: {self.steps_per_sec} steps/s")

        for b in self._buttons:
            b.draw(self.screen, self.font)


# ---------- main ----------
def main(argv: Optional[List[str]] = None):
    argv = sys.argv[1:] if argv is None else argv
    try:
        settings = resolve_settings(argv)
    except CrucibleError as ex:
        print(f"error: {ex}", file=sys.stderr)
        sys.exit(2)
    configure_logging(settings.log_level)

    paths = [a for a in argv if not a.startswith("--")]
    target = Path(paths[0]) if paths else MAP_FILES["01_lava_pool"]
    try:
        spec = load_any(target)
    except (CrucibleError, OSError) as ex:
        logger.error("[Viewer] failed to load %s: %s", target, ex)
        sys.exit(1)
    Viewer(spec, settings).run()

if __name__ == "__main__":
    main()
