"""pi-monitor: single-line terminal heartbeat for local log activity."""

from pi.monitor.color_mode import detect_system_color_mode
from pi.monitor.config import load_settings, parse_monitor_options
from pi.monitor.glyphs import encode_iterm2, image_glyph_set
from pi.monitor.loop import LoopState, RenderLoop, RenderState, run_monitor
from pi.monitor.render import (
    build_bar_area,
    classify,
    format_elapsed,
    render_line,
    render_line_with_width,
)
from pi.monitor.terminal import detect_terminal_profile, resolve_terminal_config
from pi.monitor.types import (
    BarState,
    FileState,
    Glyph,
    MonitorConfigError,
    MonitorOptions,
    ResolvedTerminalConfig,
)
from pi.monitor.watcher import LogGrowthWatcher
from pi.monitor.width import display_width

__all__ = [
    # Types
    "BarState",
    "FileState",
    "Glyph",
    "MonitorConfigError",
    "MonitorOptions",
    "ResolvedTerminalConfig",
    # Config
    "load_settings",
    "parse_monitor_options",
    "detect_system_color_mode",
    # Width
    "display_width",
    # Watcher
    "LogGrowthWatcher",
    # Rendering
    "build_bar_area",
    "classify",
    "format_elapsed",
    "render_line",
    "render_line_with_width",
    # Terminal
    "detect_terminal_profile",
    "resolve_terminal_config",
    "encode_iterm2",
    "image_glyph_set",
    # Loop
    "LoopState",
    "RenderLoop",
    "RenderState",
    "run_monitor",
]
