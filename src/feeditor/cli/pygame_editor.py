from __future__ import annotations

import argparse
import importlib.metadata
import os
import platform
import sys
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from feeditor.cli.textures import (
    ScaledSurfaceCache,
    _ensure_pygame_imported,
    build_cursor_surface,
    load_class_icons,
    load_tileset,
)
from feeditor.content.errors import ContentError
from feeditor.editor.config import DEFAULT_CONFIG_PATH, EditorConfig
from feeditor.editor.entries import CharacterEntry, ClassEntry
from feeditor.editor.lists import EntityListEditor
from feeditor.editor.session import NEW_MAP_MIN_HEIGHT, NEW_MAP_MIN_WIDTH, EditorSession
from feeditor.editor.viewport import (
    EmptyPick,
    FrameInput,
    InfoContext,
    SpawnPick,
    UnitPick,
    Viewport,
    process_frame,
)

WINDOW_SIZE = (1440, 900)
STATUS_BAR_HEIGHT = 28
TILE_SELECTOR_WIDTH = 80
TILE_SELECTOR_CELL = 64
LIST_PANEL_WIDTH = 260
LIST_ROW_HEIGHT = 26
CONTEXT_MENU_WIDTH = 280
CONTEXT_MENU_ROW_HEIGHT = 28
NAME_MARGIN = 4
MISSING_CLASS_LABEL = "<missing class>"

pygame: Any | None = None


@dataclass(frozen=True)
class ContextMenuItem:
    label: str
    action: str
    payload: Any = None


@dataclass
class ContextMenuState:
    pixel_x: int
    pixel_y: int
    items: tuple[ContextMenuItem, ...]


@dataclass
class TextPrompt:
    title: str
    action: str
    text: str = ""
    payload: Any = None


class DragTracker:
    """Middle-button drag delta owned by the host; reset once per consumed drag."""

    def __init__(self) -> None:
        self.dx = 0.0
        self.dy = 0.0

    def add(self, dx: float, dy: float) -> None:
        self.dx += dx
        self.dy += dy

    def reset(self) -> None:
        self.dx = 0.0
        self.dy = 0.0

    def settle(self, *, hovered: bool, consumed: bool) -> None:
        """Drop motion the viewport did not apply this frame."""
        if consumed or not hovered:
            self.reset()


def _viewport_rect() -> Any:
    width = WINDOW_SIZE[0] - TILE_SELECTOR_WIDTH - LIST_PANEL_WIDTH
    return pygame.Rect(LIST_PANEL_WIDTH, STATUS_BAR_HEIGHT, width, WINDOW_SIZE[1] - STATUS_BAR_HEIGHT)


def _tile_selector_rect() -> Any:
    return pygame.Rect(WINDOW_SIZE[0] - TILE_SELECTOR_WIDTH, STATUS_BAR_HEIGHT, TILE_SELECTOR_WIDTH, WINDOW_SIZE[1] - STATUS_BAR_HEIGHT)


def _list_panel_rect() -> Any:
    return pygame.Rect(0, STATUS_BAR_HEIGHT, LIST_PANEL_WIDTH, WINDOW_SIZE[1] - STATUS_BAR_HEIGHT)


def _class_label(session: EditorSession, class_index: int) -> str:
    name = session.classes.class_name(class_index)
    return name if name is not None else MISSING_CLASS_LABEL


def build_info_menu_items(session: EditorSession, info: InfoContext) -> list[ContextMenuItem]:
    class_count = len(session.classes.open_entries())
    pick = info.pick(class_count=class_count)
    target = info.target
    items = [ContextMenuItem(label=f"Tile ({target.x}, {target.y})", action="noop")]
    if isinstance(pick, UnitPick):
        unit_label = pick.unit.name if pick.unit.name else "(unnamed unit)"
        items.append(ContextMenuItem(label=f"Unit: {unit_label}", action="noop"))
        items.append(ContextMenuItem(label=f"Class: {_class_label(session, pick.unit.class_index)}", action="noop"))
        for index, entry in enumerate(session.classes.open_entries()):
            if index != pick.unit.class_index:
                items.append(ContextMenuItem(label=f"Set class: {entry.display_name()}", action="set_class", payload=index))
        items.append(ContextMenuItem(label="Rename unit", action="rename_unit"))
        items.append(ContextMenuItem(label="Delete unit", action="delete_pick"))
    elif isinstance(pick, SpawnPick):
        items.append(ContextMenuItem(label="Spawn point", action="noop"))
        items.append(ContextMenuItem(label="Delete spawn", action="delete_pick"))
    elif isinstance(pick, EmptyPick):
        if pick.can_place_unit:
            items.append(ContextMenuItem(label="Place unit", action="place_unit"))
        else:
            items.append(ContextMenuItem(label="Cannot create unit: no classes are defined", action="noop"))
        items.append(ContextMenuItem(label="Mark as spawn", action="mark_spawn"))
    items.append(ContextMenuItem(label="Close", action="noop"))
    return items


def build_file_menu_items(session: EditorSession) -> list[ContextMenuItem]:
    items = [ContextMenuItem(label="New map...", action="new_map")]
    try:
        names = session.list_maps()
    except ContentError as exc:
        session.status_message = f"failed to read levels: {exc}"
        names = []
    if not names:
        items.append(ContextMenuItem(label="Open map... (none)", action="noop"))
    for name in names:
        items.append(ContextMenuItem(label=f"Open: {name}", action="open_map", payload=name))
    items.append(ContextMenuItem(label="Save (Ctrl+S)", action="save"))
    return items


def build_entry_menu_items(editor: EntityListEditor[Any], entry_uuid: UUID) -> list[ContextMenuItem]:
    entry = editor.find(entry_uuid)
    if entry is None:
        return []
    items = [
        ContextMenuItem(label=entry.display_name(), action="noop"),
        ContextMenuItem(label=f"Rename {entry.kind}", action="rename_entry", payload=entry_uuid),
        ContextMenuItem(label="Edit description", action="describe_entry", payload=entry_uuid),
    ]
    if isinstance(entry, ClassEntry):
        items.append(ContextMenuItem(label="Next icon", action="cycle_icon", payload=entry_uuid))
    if isinstance(entry, CharacterEntry):
        items.append(ContextMenuItem(label="Set class", action="set_character_class", payload=entry_uuid))
    items.append(ContextMenuItem(label=f"Delete {entry.kind}", action="delete_entry", payload=entry_uuid))
    return items


def parse_new_map_request(text: str) -> tuple[str, int, int]:
    """``name [width height]`` from the new-map prompt."""
    parts = text.split()
    if not parts:
        raise ValueError("level must have a name")
    width, height = NEW_MAP_MIN_WIDTH, NEW_MAP_MIN_HEIGHT
    if len(parts) >= 3 and parts[-1].isdigit() and parts[-2].isdigit():
        width, height = int(parts[-2]), int(parts[-1])
        parts = parts[:-2]
    return " ".join(parts), width, height


def _frame_input(viewport_rect: Any, *, wheel: float, right_clicked: bool, drag: DragTracker, dt: float, blocked: bool) -> FrameInput:
    mouse_x, mouse_y = pygame.mouse.get_pos()
    buttons = pygame.mouse.get_pressed()
    keys = pygame.key.get_pressed()
    mods = pygame.key.get_mods()
    arrows_enabled = not (mods & (pygame.KMOD_CTRL | pygame.KMOD_META))
    return FrameInput(
        pointer_x=float(mouse_x),
        pointer_y=float(mouse_y),
        delta_time=dt,
        hovered=viewport_rect.collidepoint((mouse_x, mouse_y)) and not blocked,
        wheel=wheel,
        zoom_in_held=bool(keys[pygame.K_EQUALS]),
        zoom_out_held=bool(keys[pygame.K_MINUS]),
        left_held=arrows_enabled and bool(keys[pygame.K_LEFT]),
        right_held=arrows_enabled and bool(keys[pygame.K_RIGHT]),
        up_held=arrows_enabled and bool(keys[pygame.K_UP]),
        down_held=arrows_enabled and bool(keys[pygame.K_DOWN]),
        primary_down=bool(buttons[0]),
        secondary_down=right_clicked,
        middle_down=bool(buttons[1]),
        drag_dx=drag.dx,
        drag_dy=drag.dy,
    )


def _draw_map(
    screen: Any,
    session: EditorSession,
    viewport: Viewport,
    tiles: list[Any],
    icons: dict[str, Any],
    cursor: Any,
    cache: ScaledSurfaceCache,
    font: Any,
    *,
    preview_cell: Any,
    selected_tile: int,
    clip_rect: Any,
) -> None:
    grid = session.map
    if grid is None:
        return
    old_clip = screen.get_clip()
    screen.set_clip(clip_rect)
    size = max(1, int(viewport.zoom))
    for ty in range(grid.height):
        for tx in range(grid.width):
            x, y = viewport.grid_to_screen(tx, ty)
            tile = grid.get_tile(tx, ty)
            if 0 <= tile < len(tiles):
                screen.blit(cache.get(tiles[tile], size), (int(x), int(y)))
            else:
                pygame.draw.rect(screen, (200, 0, 200), pygame.Rect(int(x), int(y), size, size))

    if preview_cell is not None:
        x, y = viewport.grid_to_screen(preview_cell.x, preview_cell.y)
        if 0 <= selected_tile < len(tiles):
            screen.blit(cache.get(tiles[selected_tile], size), (int(x), int(y)))
        screen.blit(cache.get(cursor, size), (int(x), int(y)))

    classes = session.classes.open_entries()
    for unit in grid.units:
        x, y = viewport.grid_to_screen(unit.x, unit.y)
        icon_name = classes[unit.class_index].icon if 0 <= unit.class_index < len(classes) else None
        icon = icons.get(icon_name) if icon_name is not None else None
        if icon is not None:
            screen.blit(cache.get(icon, size), (int(x), int(y)))
        else:
            pygame.draw.circle(screen, (230, 80, 80), (int(x + size / 2), int(y + size / 2)), max(3, size // 3))
        if unit.name:
            label = font.render(unit.name, True, (255, 255, 255))
            center = x + size / 2 - label.get_width() / 2
            box = pygame.Rect(
                int(center - NAME_MARGIN),
                int(y - label.get_height() - NAME_MARGIN),
                label.get_width() + NAME_MARGIN * 2,
                label.get_height() + NAME_MARGIN * 2,
            )
            pygame.draw.rect(screen, (20, 20, 20), box, border_radius=5)
            screen.blit(label, (int(center), int(y - label.get_height())))

    for spawn in grid.spawns:
        x, y = viewport.grid_to_screen(spawn.x, spawn.y)
        screen.blit(cache.get(cursor, size), (int(x), int(y)))
    screen.set_clip(old_clip)


def _draw_tile_selector(screen: Any, tiles: list[Any], cursor: Any, selected_tile: int, cache: ScaledSurfaceCache) -> None:
    rect = _tile_selector_rect()
    pygame.draw.rect(screen, (24, 26, 36), rect)
    for index, tile in enumerate(tiles):
        x = rect.x + (TILE_SELECTOR_WIDTH - TILE_SELECTOR_CELL) // 2
        y = rect.y + 4 + index * (TILE_SELECTOR_CELL + 4)
        if y > rect.bottom:
            break
        screen.blit(pygame.transform.scale(tile, (TILE_SELECTOR_CELL, TILE_SELECTOR_CELL)), (x, y))
        if index == selected_tile:
            screen.blit(pygame.transform.scale(cursor, (TILE_SELECTOR_CELL, TILE_SELECTOR_CELL)), (x, y))


def _tile_at_pixel(pos: tuple[int, int], tile_count: int) -> int | None:
    rect = _tile_selector_rect()
    if not rect.collidepoint(pos):
        return None
    index = (pos[1] - rect.y - 4) // (TILE_SELECTOR_CELL + 4)
    if 0 <= index < tile_count:
        return index
    return None


def _list_row_rect(row: int) -> Any:
    panel = _list_panel_rect()
    return pygame.Rect(panel.x + 6, panel.y + 56 + row * LIST_ROW_HEIGHT, panel.width - 12, LIST_ROW_HEIGHT - 2)


def _search_rect() -> Any:
    panel = _list_panel_rect()
    return pygame.Rect(panel.x + 6, panel.y + 28, panel.width - 12, 22)


def _new_entry_button_rect(row_count: int) -> Any:
    return _list_row_rect(row_count).move(0, 6)


def _draw_list_panel(
    screen: Any,
    editor: EntityListEditor[Any],
    font: Any,
    icons: dict[str, Any],
    *,
    search_focused: bool,
) -> None:
    panel = _list_panel_rect()
    pygame.draw.rect(screen, (24, 26, 36), panel)
    title = f"{editor.title}{' *' if editor.dirty else ''}  (Tab: next list)"
    screen.blit(font.render(title, True, (245, 245, 245)), (panel.x + 8, panel.y + 6))
    search_rect = _search_rect()
    pygame.draw.rect(screen, (40, 44, 60) if search_focused else (32, 34, 44), search_rect)
    search_text = editor.search or "Search..."
    screen.blit(font.render(search_text, True, (205, 205, 210)), (search_rect.x + 4, search_rect.y + 3))

    rows = list(editor.filter())
    for row, entry in enumerate(rows):
        rect = _list_row_rect(row)
        pygame.draw.rect(screen, (50, 54, 70), rect)
        icon_name = getattr(entry, "icon", None)
        icon = icons.get(icon_name) if icon_name is not None else None
        if icon is not None:
            screen.blit(pygame.transform.scale(icon, (rect.height, rect.height)), rect.topleft)
        screen.blit(font.render(entry.display_name(), True, (235, 235, 240)), (rect.x + rect.height + 6, rect.y + 3))
    button = _new_entry_button_rect(len(rows))
    pygame.draw.rect(screen, (70, 100, 160), button)
    screen.blit(font.render(f"Create new {editor.kind}", True, (245, 245, 245)), (button.x + 6, button.y + 3))


def _draw_status(screen: Any, session: EditorSession, font: Any) -> None:
    pygame.draw.rect(screen, (32, 34, 44), pygame.Rect(0, 0, WINDOW_SIZE[0], STATUS_BAR_HEIGHT))
    map_text = "no map" if session.map is None else f"{session.map.name} {session.map.width}x{session.map.height}"
    dirty_text = " [unsaved]" if session.dirty else ""
    line = f"{map_text}{dirty_text} | Ctrl+N new | Ctrl+O open | Ctrl+S save | arrows pan | =/- zoom | ESC quit"
    if session.status_message:
        line = f"{line} | {session.status_message}"
    screen.blit(font.render(line, True, (240, 240, 240)), (8, 5))


def _context_menu_rect(menu_state: ContextMenuState) -> Any:
    height = max(1, len(menu_state.items)) * CONTEXT_MENU_ROW_HEIGHT
    menu_rect = pygame.Rect(menu_state.pixel_x, menu_state.pixel_y, CONTEXT_MENU_WIDTH, height)
    menu_rect.clamp_ip(pygame.Rect(0, 0, *WINDOW_SIZE))
    return menu_rect


def _draw_context_menu(screen: Any, font: Any, menu_state: ContextMenuState | None) -> None:
    if menu_state is None:
        return
    menu_rect = _context_menu_rect(menu_state)
    pygame.draw.rect(screen, (32, 34, 44), menu_rect)
    pygame.draw.rect(screen, (185, 185, 200), menu_rect, 1)
    for index, item in enumerate(menu_state.items):
        row_rect = pygame.Rect(menu_rect.x, menu_rect.y + (index * CONTEXT_MENU_ROW_HEIGHT), menu_rect.width, CONTEXT_MENU_ROW_HEIGHT)
        pygame.draw.line(screen, (64, 68, 84), (row_rect.x, row_rect.bottom), (row_rect.right, row_rect.bottom), 1)
        color = (150, 150, 160) if item.action == "noop" else (245, 245, 245)
        screen.blit(font.render(item.label, True, color), (row_rect.x + 10, row_rect.y + 5))


def _draw_prompt(screen: Any, font: Any, prompt: TextPrompt | None) -> None:
    if prompt is None:
        return
    rect = pygame.Rect(0, 0, 420, 84)
    rect.center = (WINDOW_SIZE[0] // 2, WINDOW_SIZE[1] // 2)
    pygame.draw.rect(screen, (32, 34, 44), rect)
    pygame.draw.rect(screen, (185, 185, 200), rect, 1)
    screen.blit(font.render(prompt.title, True, (245, 245, 245)), (rect.x + 10, rect.y + 8))
    screen.blit(font.render(f"{prompt.text}_", True, (235, 235, 120)), (rect.x + 10, rect.y + 34))
    screen.blit(font.render("Enter to confirm, Esc to cancel", True, (150, 150, 160)), (rect.x + 10, rect.y + 58))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="feeditor", description="Run the tactics level editor.")
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_PATH,
        help="Editor config TOML naming the project root (default: fe-editor.toml).",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Force SDL dummy video driver and exit after one frame.",
    )
    return parser


def _env_flag_enabled(var_name: str) -> bool:
    return os.environ.get(var_name, "").strip().lower() in {"1", "true", "yes", "on"}


def _print_startup_banner() -> None:
    try:
        pygame_version = importlib.metadata.version("pygame")
    except importlib.metadata.PackageNotFoundError:
        pygame_version = "not-installed"
    print(
        "[feeditor.editor] startup "
        f"python={platform.python_version()} "
        f"pygame={pygame_version} "
        f"platform={platform.platform()}"
    )


def run_editor(config_path: str = DEFAULT_CONFIG_PATH, *, headless: bool = False) -> int:
    global pygame
    if headless:
        os.environ["SDL_VIDEODRIVER"] = "dummy"
        print("[feeditor.editor] warning: headless mode active; no window will open.")

    _print_startup_banner()
    try:
        config = EditorConfig.open(config_path)
    except ContentError as exc:
        print(f"[feeditor.editor] failed to read config: {exc}", file=sys.stderr)
        return 1

    pygame = _ensure_pygame_imported()
    try:
        pygame.init()
        pygame.display.set_caption("Tactics Level Editor")
        screen = pygame.display.set_mode(WINDOW_SIZE)
    except Exception as exc:
        print(
            f"[feeditor.editor] failed to open a window: {exc}. "
            "Hint: use --headless or FEEDITOR_HEADLESS=1 without a display.",
            file=sys.stderr,
        )
        pygame.quit()
        return 1

    try:
        tiles = load_tileset(config.tileset_path)
        icons = load_class_icons(config.class_icons_dir)
    except (OSError, ValueError, pygame.error) as exc:
        print(f"[feeditor.editor] failed to load textures: {exc}", file=sys.stderr)
        pygame.quit()
        return 1
    if not icons:
        print("[feeditor.editor] no class icons are loaded. Exiting.", file=sys.stderr)
        pygame.quit()
        return 1
    default_icon = next(iter(icons))
    icon_names = list(icons)

    try:
        session = EditorSession.open(config, default_icon=default_icon)
    except ContentError as exc:
        print(f"[feeditor.editor] failed to load project: {exc}", file=sys.stderr)
        pygame.quit()
        return 1

    if headless:
        session.begin_frame()
        session.end_frame(0.0)
        pygame.quit()
        return 0

    cursor = build_cursor_surface()
    cache = ScaledSurfaceCache()
    clock = pygame.time.Clock()
    font = pygame.font.SysFont("consolas", 16)
    viewport_rect = _viewport_rect()
    viewport = Viewport(origin_x=float(viewport_rect.x), origin_y=float(viewport_rect.y))
    drag = DragTracker()
    selected_tile = 0
    context_menu: ContextMenuState | None = None
    info: InfoContext | None = None
    prompt: TextPrompt | None = None
    search_focused = False
    paint_locked = False
    running = True
    active_list = 0

    def active_editor() -> EntityListEditor[Any]:
        return session.editors[active_list]

    def open_prompt(title: str, action: str, text: str = "", payload: Any = None) -> None:
        nonlocal prompt
        prompt = TextPrompt(title=title, action=action, text=text, payload=payload)
        pygame.key.start_text_input()

    def confirm_prompt(current: TextPrompt) -> None:
        nonlocal info
        if current.action == "new_map":
            try:
                name, width, height = parse_new_map_request(current.text)
                session.new_map(name, width, height)
                info = None
            except ValueError as exc:
                session.status_message = str(exc)
        elif current.action == "rename_unit" and info is not None:
            pick = info.pick(class_count=len(session.classes.open_entries()))
            if isinstance(pick, UnitPick):
                info.rename_unit(pick, current.text)
        elif current.action in {"rename_entry", "describe_entry", "set_character_class"}:
            editor, entry_uuid = current.payload
            entry = editor.find(entry_uuid)
            if entry is None:
                return
            if current.action == "rename_entry":
                entry.name = current.text
            elif current.action == "describe_entry":
                entry.desc = current.text
            else:
                entry.class_name = current.text

    def apply_menu_item(item: ContextMenuItem) -> None:
        pick = None
        if info is not None:
            pick = info.pick(class_count=len(session.classes.open_entries()))
        if item.action == "place_unit" and info is not None:
            info.place_unit(class_count=len(session.classes.open_entries()))
        elif item.action == "mark_spawn" and info is not None:
            info.mark_spawn()
        elif item.action == "delete_pick" and info is not None and pick is not None:
            info.delete(pick)
        elif item.action == "set_class" and info is not None and isinstance(pick, UnitPick):
            info.set_unit_class(pick, int(item.payload))
        elif item.action == "rename_unit" and isinstance(pick, UnitPick):
            open_prompt("Unit name (optional)", "rename_unit", pick.unit.name)
        elif item.action == "new_map":
            open_prompt(f"New map: name [width height] (min {NEW_MAP_MIN_WIDTH}x{NEW_MAP_MIN_HEIGHT})", "new_map")
        elif item.action == "open_map":
            session.open_map(str(item.payload))
        elif item.action == "save":
            session.save()
        elif item.action in {"rename_entry", "describe_entry", "set_character_class"}:
            editor = active_editor()
            entry = editor.find(item.payload)
            if entry is None:
                return
            if item.action == "rename_entry":
                open_prompt(f"{entry.kind.capitalize()} name", item.action, entry.name, (editor, entry.uuid))
            elif item.action == "describe_entry":
                open_prompt(f"{entry.kind.capitalize()} description", item.action, entry.desc, (editor, entry.uuid))
            else:
                open_prompt("Character class", item.action, entry.class_name, (editor, entry.uuid))
        elif item.action == "cycle_icon":
            entry = session.classes.find(item.payload)
            if entry is not None:
                position = icon_names.index(entry.icon) if entry.icon in icon_names else -1
                entry.icon = icon_names[(position + 1) % len(icon_names)]
        elif item.action == "delete_entry":
            editor = active_editor()
            entry = editor.find(item.payload)
            if entry is None:
                return
            if isinstance(entry, ClassEntry):
                try:
                    session.delete_class(entry)
                except ContentError as exc:
                    session.status_message = str(exc)
            else:
                editor.mark_closed(entry)

    while running:
        dt = clock.tick(60) / 1000.0
        session.begin_frame()
        wheel = 0.0
        right_clicked = False
        ctrl = pygame.KMOD_META if platform.system() == "Darwin" else pygame.KMOD_CTRL

        for event in pygame.event.get():
            if event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                paint_locked = False
            if event.type == pygame.QUIT:
                running = False
            elif prompt is not None:
                if event.type == pygame.TEXTINPUT:
                    prompt.text += event.text
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_BACKSPACE:
                    prompt.text = prompt.text[:-1]
                elif event.type == pygame.KEYDOWN and event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
                    current, prompt = prompt, None
                    pygame.key.stop_text_input()
                    confirm_prompt(current)
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    prompt = None
                    pygame.key.stop_text_input()
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                if context_menu is not None:
                    context_menu = None
                elif search_focused:
                    search_focused = False
                else:
                    running = False
            elif event.type == pygame.KEYDOWN and event.mod & ctrl and event.key == pygame.K_s:
                session.save()
            elif event.type == pygame.KEYDOWN and event.mod & ctrl and event.key == pygame.K_n:
                context_menu = None
                open_prompt(f"New map: name [width height] (min {NEW_MAP_MIN_WIDTH}x{NEW_MAP_MIN_HEIGHT})", "new_map")
            elif event.type == pygame.KEYDOWN and event.mod & ctrl and event.key == pygame.K_o:
                info = None
                context_menu = ContextMenuState(pixel_x=8, pixel_y=STATUS_BAR_HEIGHT, items=tuple(build_file_menu_items(session)))
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_TAB and not search_focused:
                active_list = (active_list + 1) % len(session.editors)
                context_menu = None
            elif search_focused and event.type == pygame.TEXTINPUT:
                active_editor().search += event.text
            elif search_focused and event.type == pygame.KEYDOWN and event.key == pygame.K_BACKSPACE:
                active_editor().search = active_editor().search[:-1]
            elif event.type == pygame.MOUSEWHEEL:
                wheel += float(event.y)
            elif event.type == pygame.MOUSEMOTION and event.buttons[1]:
                drag.add(float(event.rel[0]), float(event.rel[1]))
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button in (1, 3) and context_menu is not None:
                menu_rect = _context_menu_rect(context_menu)
                if event.button == 1 and menu_rect.collidepoint(event.pos):
                    row_index = (event.pos[1] - menu_rect.y) // CONTEXT_MENU_ROW_HEIGHT
                    if 0 <= row_index < len(context_menu.items):
                        apply_menu_item(context_menu.items[row_index])
                context_menu = None
                paint_locked = True
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button in (1, 3) and _list_panel_rect().collidepoint(event.pos):
                editor = active_editor()
                rows = list(editor.filter())
                search_focused = _search_rect().collidepoint(event.pos)
                if search_focused:
                    pygame.key.start_text_input()
                elif _new_entry_button_rect(len(rows)).collidepoint(event.pos) and event.button == 1:
                    entry = editor.add_entry()
                    open_prompt(f"{entry.kind.capitalize()} name", "rename_entry", payload=(editor, entry.uuid))
                else:
                    for row, entry in enumerate(rows):
                        if _list_row_rect(row).collidepoint(event.pos):
                            context_menu = ContextMenuState(
                                pixel_x=event.pos[0],
                                pixel_y=event.pos[1],
                                items=tuple(build_entry_menu_items(editor, entry.uuid)),
                            )
                            break
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                tile_index = _tile_at_pixel(event.pos, len(tiles))
                if tile_index is not None:
                    selected_tile = tile_index
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 3:
                right_clicked = True

        preview_cell = None
        if session.map is not None:
            blocked = context_menu is not None or prompt is not None or paint_locked
            frame = _frame_input(viewport_rect, wheel=wheel, right_clicked=right_clicked, drag=drag, dt=dt, blocked=blocked)
            outcome = process_frame(viewport, session.map, frame, selected_tile=selected_tile)
            drag.settle(hovered=frame.hovered, consumed=outcome.drag_consumed)
            if outcome.show_preview:
                preview_cell = outcome.hovered_cell
            if outcome.info_target is not None:
                info = InfoContext(session.map, outcome.info_target)
                mouse_x, mouse_y = pygame.mouse.get_pos()
                context_menu = ContextMenuState(
                    pixel_x=mouse_x,
                    pixel_y=mouse_y,
                    items=tuple(build_info_menu_items(session, info)),
                )
        else:
            drag.reset()

        screen.fill((17, 18, 25))
        _draw_map(
            screen,
            session,
            viewport,
            tiles,
            icons,
            cursor,
            cache,
            font,
            preview_cell=preview_cell,
            selected_tile=selected_tile,
            clip_rect=viewport_rect,
        )
        _draw_list_panel(screen, active_editor(), font, icons, search_focused=search_focused)
        _draw_tile_selector(screen, tiles, cursor, selected_tile, cache)
        _draw_status(screen, session, font)
        _draw_context_menu(screen, font, context_menu)
        _draw_prompt(screen, font, prompt)
        pygame.display.flip()

        session.end_frame(dt)

    pygame.quit()
    return 0


def main(argv: list[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)
    headless = args.headless or _env_flag_enabled("FEEDITOR_HEADLESS")
    raise SystemExit(run_editor(args.config, headless=headless))


if __name__ == "__main__":
    main()
