"""Capture configuration.

All environment parsing happens here; the session receives a resolved
:class:`CaptureConfig`.

Environment variables:

* ``MAP_CAPTCHA_PALETTE``: path to a JSON palette file.
* ``MAP_CAPTCHA_BACKGROUND``: canvas color as ``r,g,b`` or ``r,g,b,a``.
* ``MAP_CAPTCHA_START_STOPPED``: start sessions stopped.
"""

import os
from dataclasses import dataclass
from typing import FrozenSet, Mapping, Optional

from map_captcha.protocol import FILLED_MAP, FRAME_ENTITIES
from map_captcha.renderer.compositor import DEFAULT_BACKGROUND
from map_captcha.renderer.palette import RGBA, Palette


def _env_bool(env: Mapping[str, str], name: str, default: bool = False) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    val = raw.strip().lower()
    if val in {"1", "true", "yes", "on"}:
        return True
    if val in {"0", "false", "no", "off"}:
        return False
    return default


def _env_str(env: Mapping[str, str], name: str, default: Optional[str] = None) -> Optional[str]:
    raw = env.get(name)
    if raw is None:
        return default
    raw = raw.strip()
    return raw if raw else default


def _parse_color(raw: str) -> RGBA:
    try:
        channels = [int(part) for part in raw.split(",")]
    except ValueError:
        raise ValueError(f"Malformed color {raw!r}") from None
    if len(channels) == 3:
        channels.append(255)
    if len(channels) != 4 or any(not 0 <= c <= 255 for c in channels):
        raise ValueError(f"Color must be r,g,b[,a] in 0-255: {raw!r}")
    r, g, b, a = channels
    return (r, g, b, a)


@dataclass(frozen=True)
class CaptureConfig:
    """Resolved session settings.

    Attributes:
        palette_path: JSON palette file; the built-in map palette if ``None``.
        background: Canvas fill color.
        frame_entities: Holder entity names that qualify as placements.
        filled_item: Item name of a filled map tile.
        start_stopped: Whether a new session ignores events until resumed.
    """

    palette_path: Optional[str] = None
    background: RGBA = DEFAULT_BACKGROUND
    frame_entities: FrozenSet[str] = FRAME_ENTITIES
    filled_item: str = FILLED_MAP
    start_stopped: bool = False

    def load_palette(self) -> Palette:
        if self.palette_path is None:
            return Palette.default()
        return Palette.from_json(self.palette_path)


def load_config(env: Optional[Mapping[str, str]] = None) -> CaptureConfig:
    """Build a :class:`CaptureConfig` from ``env`` (defaults to ``os.environ``)."""
    if env is None:
        env = os.environ
    background = _env_str(env, "MAP_CAPTCHA_BACKGROUND")
    return CaptureConfig(
        palette_path=_env_str(env, "MAP_CAPTCHA_PALETTE"),
        background=_parse_color(background) if background else DEFAULT_BACKGROUND,
        start_stopped=_env_bool(env, "MAP_CAPTCHA_START_STOPPED"),
    )
