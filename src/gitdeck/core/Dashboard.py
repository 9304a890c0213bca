# gitdeck/core/Dashboard.py
"""Dashboard Module
================
The `Dashboard` class is the controller of gitdeck. It owns every piece of
mutable UI state (one `PanelState` per panel, the focused panel, the active
source of the detail view, the layout, the input mode, the help overlay) and
changes it only inside `update`, which handles exactly one message at a time.

Nothing in `update` blocks. Repository work is handed to the `AsyncEngine` as
a task whose completion comes back through `to_ui_queue` as another message.
Each panel fetch, and the detail fetch, carries a generation number; a
completion older than the newest request for the same target is dropped.

`run()` is the curses main loop: drain finished work, read one input event,
redraw when something changed.
"""

import logging
import queue
import time
from typing import Any, Callable, Optional

import pyperclip

from gitdeck.core.ContentPipeline import (
    apply_panel_content,
    apply_panel_error,
    build_lines,
    error_text,
    fetch_detail,
    fetch_panel,
    selection_identifier,
)
from gitdeck.core.InputMode import Confirm, InputMode, ModeOutcome, NormalMode, TextPrompt
from gitdeck.core.Layout import MIN_HEIGHT, MIN_WIDTH, LayoutPlan, LayoutRatios, compute_layout
from gitdeck.core.Messages import (
    ActionResultMsg,
    FileChangedMsg,
    KeyMsg,
    LineClickedMsg,
    MainContentMsg,
    MouseAction,
    MouseMsg,
    PanelContentMsg,
    ResizeMsg,
    TaskErrorMsg,
)
from gitdeck.core.PanelState import (
    DATA_PANELS,
    BranchLine,
    CommitLine,
    FileLine,
    Panel,
    PanelState,
    StashLine,
    Viewport,
)
from gitdeck.integrations.GitBridge import GitBridge, GitError
from gitdeck.ui.HitTest import HELP_BUTTON_ID, HitTestRegistry, ZoneKind
from gitdeck.ui.KeyBinder import KeyMap
from gitdeck.ui.Themes import THEME_NAMES


logger = logging.getLogger("gitdeck")

FOCUS_ACTIONS: dict[str, Panel] = {
    "focus_main": Panel.MAIN,
    "focus_status": Panel.STATUS,
    "focus_files": Panel.FILES,
    "focus_branches": Panel.BRANCHES,
    "focus_commits": Panel.COMMITS,
    "focus_stash": Panel.STASH,
    "focus_secondary": Panel.SECONDARY,
}

# Panels whose viewport goes back to the top whenever they receive focus.
RESET_ON_FOCUS = frozenset({Panel.STASH, Panel.SECONDARY})

PANEL_ACTIONS: dict[Panel, tuple[str, ...]] = {
    Panel.FILES: ("commit", "stash", "stash_all", "stage_item", "stage_all", "discard", "amend_commit"),
    Panel.BRANCHES: ("checkout", "new_branch", "delete_branch", "rename_branch"),
    Panel.COMMITS: ("amend_commit", "revert", "reset_to_commit"),
    Panel.STASH: ("stash_apply", "stash_pop", "stash_drop"),
}

MAIN_WHEEL_STEP = 3
COMMAND_LOG_LIMIT = 500


class Dashboard:
    """Class Dashboard
    ===================
    Message-driven controller of the dashboard.

    Attributes:
        git (GitBridge): Synchronous repository command layer.
        config (dict): Application configuration.
        keymap (KeyMap): Immutable key bindings.
        engine: Task runner with a `submit_task(dict)` method (normally `AsyncEngine`).
        to_ui_queue (queue.Queue): Messages produced off-thread (fetch results, file changes).
        panels (dict[Panel, PanelState]): One state record per panel.
        focused (Panel): The panel receiving keyboard input.
        active_source (Panel): The data panel whose selection drives the Main panel.
        layout (Optional[LayoutPlan]): Geometry for the current size and focus.
        mode (InputMode): Normal, text prompt or confirmation.
        show_help (bool): Whether the help overlay replaces the panels.
        help_viewport (Viewport): Scroll state of the help overlay.
        theme_index (int): Index into `THEME_NAMES`.
        hit_test (HitTestRegistry): Zones registered by the last rendered frame.
        running (bool): Main loop keeps going while True.
        dirty (bool): Set by every state change; cleared after a redraw.
    """

    def __init__(
        self,
        git: GitBridge,
        config: Optional[dict[str, Any]] = None,
        keymap: Optional[KeyMap] = None,
        engine: Any = None,
        to_ui_queue: Optional["queue.Queue[Any]"] = None,
    ) -> None:
        self.git = git
        self.config: dict[str, Any] = config or {}
        self.keymap = keymap or KeyMap.from_config(self.config)
        self.to_ui_queue: queue.Queue[Any] = to_ui_queue if to_ui_queue is not None else queue.Queue()
        self.engine = engine
        self.ratios = LayoutRatios.from_config(self.config)

        self.panels: dict[Panel, PanelState] = {panel: PanelState(panel) for panel in Panel}
        self.panels[Panel.SECONDARY].set_text("")
        self.command_log: list[str] = []
        self.focused: Panel = Panel.STATUS
        self.active_source: Panel = Panel.STATUS
        self.layout: Optional[LayoutPlan] = None
        self.width: int = 0
        self.height: int = 0
        self.mode: InputMode = NormalMode()
        self.show_help: bool = False
        self.help_viewport = Viewport()
        self.help_viewport.set_content(self.keymap.help_lines())

        theme_name = self.config.get("theme", {}).get("name", THEME_NAMES[0])
        self.theme_index: int = THEME_NAMES.index(theme_name) if theme_name in THEME_NAMES else 0

        self.hit_test = HitTestRegistry()
        self._issued: dict[Panel, int] = {panel: 0 for panel in Panel}
        self.running: bool = True
        self.dirty: bool = True

    # ------------------------------------------------------------------ props

    @property
    def theme_name(self) -> str:
        return THEME_NAMES[self.theme_index]

    @property
    def in_normal_mode(self) -> bool:
        return isinstance(self.mode, NormalMode)

    @property
    def too_small(self) -> bool:
        return self.width < MIN_WIDTH or self.height < MIN_HEIGHT

    # ------------------------------------------------------------------ update

    def update(self, msg: Any) -> None:
        """Handles one message. Never blocks."""
        self.dirty = True
        if isinstance(msg, KeyMsg):
            self._handle_key(msg.key)
        elif isinstance(msg, MouseMsg):
            self._handle_mouse(msg)
        elif isinstance(msg, ResizeMsg):
            self.width, self.height = msg.width, msg.height
            self._recompute_layout()
        elif isinstance(msg, PanelContentMsg):
            self._handle_panel_content(msg)
        elif isinstance(msg, MainContentMsg):
            self._handle_main_content(msg)
        elif isinstance(msg, LineClickedMsg):
            self._handle_line_clicked(msg)
        elif isinstance(msg, FileChangedMsg):
            self.refresh_all()
        elif isinstance(msg, ActionResultMsg):
            self._handle_action_result(msg)
        elif isinstance(msg, TaskErrorMsg):
            logger.error(f"Background task {msg.task} failed: {msg.error}")
            self._log_command(f"{msg.task}: {msg.error}", ok=False)
        else:
            logger.warning(f"Dashboard received unknown message: {msg!r}")
            self.dirty = False

    def process_pending(self, limit: int = 100) -> int:
        """Applies up to `limit` messages waiting on `to_ui_queue`."""
        handled = 0
        while handled < limit:
            try:
                msg = self.to_ui_queue.get_nowait()
            except queue.Empty:
                break
            self.update(msg)
            handled += 1
        return handled

    # ------------------------------------------------------------------ fetches

    def refresh_all(self) -> None:
        """Re-fetches every data panel. Main follows through the active source."""
        for panel in DATA_PANELS:
            self.fetch_panel(panel)

    def fetch_panel(self, panel: Panel) -> None:
        self._issued[panel] += 1
        generation = self._issued[panel]
        git = self.git
        self._submit(
            f"fetch:{panel.title}",
            lambda: fetch_panel(git, panel),
            on_result=lambda payload: PanelContentMsg(panel, payload, generation),
            on_error=lambda exc: PanelContentMsg(panel, None, generation, error=error_text(exc)),
        )

    def fetch_detail(self) -> None:
        self._issued[Panel.MAIN] += 1
        generation = self._issued[Panel.MAIN]
        source = self.active_source
        line = self.panels[source].selected()
        git = self.git
        self._submit(
            f"detail:{source.title}",
            lambda: fetch_detail(git, source, line),
            on_result=lambda text: MainContentMsg(text, generation, source),
            on_error=lambda exc: MainContentMsg(error_text(exc), generation, source),
        )

    def _submit(
        self,
        name: str,
        func: Callable[[], Any],
        on_result: Callable[[Any], Any],
        on_error: Optional[Callable[[GitError], Any]] = None,
    ) -> None:
        if self.engine is None:
            logger.error(f"No task engine attached, dropping task {name}")
            return
        task: dict[str, Any] = {"type": "call", "name": name, "func": func, "on_result": on_result}
        if on_error is not None:
            task["on_error"] = on_error
        self.engine.submit_task(task)

    def _handle_panel_content(self, msg: PanelContentMsg) -> None:
        if msg.generation < self._issued[msg.panel]:
            logger.debug(f"Dropping stale {msg.panel.title} content (gen {msg.generation})")
            return
        state = self.panels[msg.panel]
        if msg.error is not None:
            apply_panel_error(state, msg.error)
        else:
            content, lines = build_lines(msg.panel, msg.payload)
            apply_panel_content(state, content, lines)
        self.fetch_detail()

    def _handle_main_content(self, msg: MainContentMsg) -> None:
        if msg.generation < self._issued[Panel.MAIN]:
            logger.debug(f"Dropping stale detail content (gen {msg.generation})")
            return
        self.panels[Panel.MAIN].set_text(msg.content)

    def _handle_line_clicked(self, msg: LineClickedMsg) -> None:
        state = self.panels[msg.panel]
        state.select(msg.index)
        self.active_source = msg.panel
        self.panels[Panel.MAIN].viewport.goto_top()
        self.fetch_detail()

    # ------------------------------------------------------------------ focus / layout

    def set_focus(self, panel: Panel) -> None:
        if panel is self.focused:
            return
        self.focused = panel
        if panel in RESET_ON_FOCUS:
            state = self.panels[panel]
            state.viewport.goto_top()
            if panel.is_selectable:
                state.viewport.ensure_visible(state.cursor)
        if panel not in (Panel.MAIN, Panel.SECONDARY):
            self.active_source = panel
            self.panels[Panel.MAIN].viewport.goto_top()
            self.fetch_detail()
        self._recompute_layout()

    def _recompute_layout(self) -> None:
        if self.width <= 0 or self.height <= 0:
            return
        self.layout = compute_layout(self.width, self.height, self.focused, self.ratios)
        for panel, state in self.panels.items():
            width, height = self.layout.viewport_size(panel)
            state.viewport.set_size(width, height)
            if panel.is_selectable:
                state.viewport.ensure_visible(state.cursor)
        self.help_viewport.set_size(
            max(0, int(self.width * 0.5) - 2), max(0, int(self.height * 0.75) - 2)
        )

    # ------------------------------------------------------------------ keys

    def _handle_key(self, key: str) -> None:
        if not self.in_normal_mode:
            self._handle_mode_key(key)
            return

        km = self.keymap
        if self.show_help:
            if km.matches("quit", key):
                self.running = False
            elif km.matches("toggle_help", key) or km.matches("cancel", key):
                self.show_help = False
            elif km.matches("up", key):
                self.help_viewport.scroll_up()
            elif km.matches("down", key):
                self.help_viewport.scroll_down()
            elif km.matches("page_up", key):
                self.help_viewport.scroll_up(max(1, self.help_viewport.height))
            elif km.matches("page_down", key):
                self.help_viewport.scroll_down(max(1, self.help_viewport.height))
            return

        if km.matches("quit", key):
            self.running = False
        elif km.matches("toggle_help", key):
            self.toggle_help()
        elif km.matches("switch_theme", key):
            self.theme_index = (self.theme_index + 1) % len(THEME_NAMES)
            logger.info(f"Switched theme to {self.theme_name}")
        elif km.matches("focus_next", key):
            self.set_focus(self.focused.next())
        elif km.matches("focus_prev", key):
            self.set_focus(self.focused.prev())
        else:
            focus_action = km.lookup(key, tuple(FOCUS_ACTIONS))
            if focus_action is not None:
                self.set_focus(FOCUS_ACTIONS[focus_action])
            else:
                self._handle_panel_key(key)

    def toggle_help(self) -> None:
        self.show_help = not self.show_help
        if self.show_help:
            self.help_viewport.goto_top()

    def _handle_panel_key(self, key: str) -> None:
        km = self.keymap
        panel = self.focused
        state = self.panels[panel]

        if km.matches("up", key) or km.matches("down", key):
            delta = -1 if km.matches("up", key) else 1
            if panel.is_selectable:
                if state.move_cursor(delta):
                    self.panels[Panel.MAIN].viewport.goto_top()
                    self.fetch_detail()
            elif delta < 0:
                state.viewport.scroll_up()
            else:
                state.viewport.scroll_down()
            return

        if km.matches("page_up", key) or km.matches("page_down", key):
            step = max(1, state.viewport.height)
            delta = -step if km.matches("page_up", key) else step
            if panel.is_selectable:
                if state.move_cursor(delta):
                    self.panels[Panel.MAIN].viewport.goto_top()
                    self.fetch_detail()
            elif delta < 0:
                state.viewport.scroll_up(step)
            else:
                state.viewport.scroll_down(step)
            return

        if km.matches("copy_selection", key) and panel.is_selectable:
            self._copy_selection(state)
            return

        action = km.lookup(key, PANEL_ACTIONS.get(panel, ()))
        if action is not None:
            getattr(self, f"_action_{action}")(state)

    def _handle_mode_key(self, key: str) -> None:
        mode = self.mode
        if isinstance(mode, TextPrompt):
            outcome = mode.handle_key(key)
            if outcome is ModeOutcome.KEEP:
                return
            self.mode = NormalMode()
            if outcome is ModeOutcome.SUBMIT:
                mode.on_submit(mode.value)
        elif isinstance(mode, Confirm):
            outcome = mode.handle_key(key)
            if outcome is ModeOutcome.KEEP:
                return
            self.mode = NormalMode()
            mode.on_decision(mode.decision)

    def prompt(self, title: str, placeholder: str, on_submit: Callable[[str], None], initial: str = "") -> None:
        self.mode = TextPrompt(title, placeholder, on_submit, buffer=initial, cursor=len(initial))

    def confirm(self, message: str, on_confirm: Callable[[], None]) -> None:
        def decide(accepted: bool) -> None:
            if accepted:
                on_confirm()

        self.mode = Confirm(message, decide)

    # ------------------------------------------------------------------ mouse

    def _handle_mouse(self, msg: MouseMsg) -> None:
        if not self.in_normal_mode:
            return

        if self.show_help:
            zone = self.hit_test.resolve(msg.y, msg.x)
            if msg.action is MouseAction.RELEASE and zone is not None and zone.zone_id == HELP_BUTTON_ID:
                self.toggle_help()
            elif msg.action is MouseAction.WHEEL_UP:
                self.help_viewport.scroll_up()
            elif msg.action is MouseAction.WHEEL_DOWN:
                self.help_viewport.scroll_down()
            return

        if msg.action in (MouseAction.WHEEL_UP, MouseAction.WHEEL_DOWN):
            panel = self.hit_test.panel_at(msg.y, msg.x)
            if panel is None:
                return
            step = MAIN_WHEEL_STEP if panel is Panel.MAIN else 1
            viewport = self.panels[panel].viewport
            if msg.action is MouseAction.WHEEL_UP:
                viewport.scroll_up(step)
            else:
                viewport.scroll_down(step)
            return

        if msg.action is not MouseAction.RELEASE:
            return

        zone = self.hit_test.resolve(msg.y, msg.x)
        if zone is None:
            return
        if zone.kind is ZoneKind.BUTTON and zone.zone_id == HELP_BUTTON_ID:
            self.toggle_help()
        elif zone.kind is ZoneKind.LINE and zone.panel is not None and zone.line_index is not None:
            if zone.panel is not self.focused:
                self.set_focus(zone.panel)
            self.update(LineClickedMsg(zone.panel, zone.line_index))
        elif zone.kind is ZoneKind.PANEL and zone.panel is not None:
            if zone.panel is not self.focused:
                self.set_focus(zone.panel)

    # ------------------------------------------------------------------ actions

    def run_action(self, description: str, func: Callable[[], Any], refresh: bool = True) -> None:
        """Runs a repository action off-thread and reports an `ActionResultMsg`."""
        logger.info(f"Dispatching action: {description}")
        self._submit(
            f"action:{description}",
            func,
            on_result=lambda _out: ActionResultMsg(description, ok=True, refresh=refresh),
            on_error=lambda exc: ActionResultMsg(description, ok=False, error=str(exc)),
        )

    def _handle_action_result(self, msg: ActionResultMsg) -> None:
        if msg.ok:
            self._log_command(msg.description, ok=True)
            if msg.refresh:
                self.refresh_all()
        else:
            logger.error(f"Action failed: {msg.description}: {msg.error}")
            self._log_command(f"{msg.description}: {msg.error}", ok=False)

    def _log_command(self, text: str, ok: bool) -> None:
        stamp = time.strftime("%H:%M:%S")
        self.command_log.append(f"{stamp} {'✓' if ok else '✗'} {text}")
        del self.command_log[:-COMMAND_LOG_LIMIT]
        secondary = self.panels[Panel.SECONDARY]
        secondary.set_text("\n".join(self.command_log))
        secondary.cursor = len(secondary.lines) - 1
        secondary.viewport.goto_bottom()

    def _copy_selection(self, state: PanelState) -> None:
        value = selection_identifier(state.selected())
        if value is None:
            return

        def copy() -> None:
            try:
                pyperclip.copy(value)
            except pyperclip.PyperclipException as e:
                raise GitError(f"clipboard unavailable: {e}") from e

        self.run_action(f"copy {value}", copy, refresh=False)

    # Files -----------------------------------------------------------------

    def _action_stage_item(self, state: PanelState) -> None:
        line = state.selected()
        if not isinstance(line, FileLine):
            return
        git = self.git
        if line.is_staged and not line.is_dir:
            self.run_action(f"reset {line.path}", lambda: git.reset_paths(line.path))
        else:
            self.run_action(f"add {line.path}", lambda: git.add(line.path))

    def _action_stage_all(self, state: PanelState) -> None:
        self.run_action("add .", self.git.add_all)

    def _action_discard(self, state: PanelState) -> None:
        line = state.selected()
        if not isinstance(line, FileLine):
            return
        git = self.git
        if line.is_untracked:
            self.confirm(
                f"Delete untracked {line.path}?",
                lambda: self.run_action(f"clean {line.path}", lambda: git.clean(line.path)),
            )
        else:
            self.confirm(
                f"Discard changes to {line.path}?",
                lambda: self.run_action(f"restore {line.path}", lambda: git.restore(line.path)),
            )

    def _action_commit(self, state: PanelState) -> None:
        git = self.git
        self.prompt(
            "Commit message",
            "Enter commit message...",
            lambda message: self.run_action(f"commit -m {message!r}", lambda: git.commit(message)),
        )

    def _action_stash(self, state: PanelState) -> None:
        git = self.git
        self.prompt(
            "Stash message",
            "Enter stash message...",
            lambda message: self.run_action(f"stash push -m {message!r}", lambda: git.stash_push(message)),
        )

    def _action_stash_all(self, state: PanelState) -> None:
        git = self.git
        self.prompt(
            "Stash all (incl. untracked)",
            "Enter stash message...",
            lambda message: self.run_action(
                f"stash push -u -m {message!r}",
                lambda: git.stash_push(message, include_untracked=True),
            ),
        )

    def _action_amend_commit(self, state: PanelState) -> None:
        git = self.git
        self.confirm(
            "Amend the last commit with the staged changes?",
            lambda: self.run_action("commit --amend --no-edit", git.amend),
        )

    # Branches --------------------------------------------------------------

    def _action_checkout(self, state: PanelState) -> None:
        line = state.selected()
        if not isinstance(line, BranchLine) or line.is_current:
            return
        git = self.git
        self.run_action(f"checkout {line.name}", lambda: git.checkout(line.name))

    def _action_new_branch(self, state: PanelState) -> None:
        git = self.git
        self.prompt(
            "New branch",
            "Enter branch name...",
            lambda name: self.run_action(f"switch -c {name}", lambda: git.switch(name, create=True)),
        )

    def _action_delete_branch(self, state: PanelState) -> None:
        line = state.selected()
        if not isinstance(line, BranchLine):
            return
        git = self.git
        self.confirm(
            f"Delete branch {line.name}?",
            lambda: self.run_action(f"branch -d {line.name}", lambda: git.delete_branch(line.name)),
        )

    def _action_rename_branch(self, state: PanelState) -> None:
        line = state.selected()
        if not isinstance(line, BranchLine):
            return
        git = self.git
        old = line.name
        self.prompt(
            f"Rename branch {old}",
            "Enter new branch name...",
            lambda new: self.run_action(f"branch -m {old} {new}", lambda: git.rename_branch(old, new)),
            initial=old,
        )

    # Commits ---------------------------------------------------------------

    def _action_revert(self, state: PanelState) -> None:
        line = state.selected()
        if not isinstance(line, CommitLine) or not line.is_commit:
            return
        git = self.git
        self.run_action(f"revert {line.sha}", lambda: git.revert(line.sha))

    def _action_reset_to_commit(self, state: PanelState) -> None:
        line = state.selected()
        if not isinstance(line, CommitLine) or not line.is_commit:
            return
        git = self.git
        self.confirm(
            f"Reset current branch to {line.sha}? (mixed)",
            lambda: self.run_action(f"reset --mixed {line.sha}", lambda: git.reset_to(line.sha)),
        )

    # Stash -----------------------------------------------------------------

    def _action_stash_apply(self, state: PanelState) -> None:
        line = state.selected()
        if isinstance(line, StashLine):
            git = self.git
            self.run_action(f"stash apply {line.stash_id}", lambda: git.stash_apply(line.stash_id))

    def _action_stash_pop(self, state: PanelState) -> None:
        line = state.selected()
        if isinstance(line, StashLine):
            git = self.git
            self.run_action(f"stash pop {line.stash_id}", lambda: git.stash_pop(line.stash_id))

    def _action_stash_drop(self, state: PanelState) -> None:
        line = state.selected()
        if not isinstance(line, StashLine):
            return
        git = self.git
        self.confirm(
            f"Drop {line.stash_id}?",
            lambda: self.run_action(f"stash drop {line.stash_id}", lambda: git.stash_drop(line.stash_id)),
        )

    # ------------------------------------------------------------------ main loop

    def run(self, stdscr: Any, watcher: Any = None) -> None:
        """Curses main loop. Returns when `running` becomes False."""
        from gitdeck.ui.DrawScreen import DrawScreen
        from gitdeck.ui.KeyBinder import KeyBinder
        from gitdeck.ui.TerminalAppMode import TerminalAppMode

        app_mode = TerminalAppMode()
        app_mode.enter(stdscr)
        try:
            stdscr.timeout(50)
            drawer = DrawScreen(stdscr, self)
            keybinder = KeyBinder(stdscr, timeout_ms=50)

            if self.engine is not None:
                self.engine.start()
            if watcher is not None:
                watcher.start()

            height, width = stdscr.getmaxyx()
            self.update(ResizeMsg(width=width, height=height))
            self.refresh_all()

            while self.running:
                self.process_pending()
                msg = keybinder.get_key_input()
                if msg is not None:
                    self.update(msg)
                    self.process_pending()
                if self.dirty:
                    drawer.draw()
                    self.dirty = False
        finally:
            if watcher is not None:
                watcher.stop()
            if self.engine is not None:
                self.engine.stop()
            app_mode.exit()
