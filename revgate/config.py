"""
Engine configuration.

Configuration is data: a frozen EngineConfig built from defaults or from a
`revgate.toml` file. Nothing reads ambient global state.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .errors import ConfigError


CONFIG_FILENAME = "revgate.toml"
DEFAULT_STORE_DIRNAME = ".revgate"

DEFAULT_ALLOWED_LAYERS: tuple[str, ...] = (
    "primitives",
    "composed",
    "blocks",
    "patterns",
    "shells",
    "pages",
)

# Short category prefix, a hyphen, then lowercase hyphenated words. Applied
# with fullmatch, so a trailing newline is not accepted.
DEFAULT_TESTID_PATTERN = r"^[a-z]{2,5}-[a-z0-9]+(?:-[a-z0-9]+)*$"


@dataclass(frozen=True)
class EngineConfig:
    allowed_layers: tuple[str, ...] = DEFAULT_ALLOWED_LAYERS
    testid_pattern: str = DEFAULT_TESTID_PATTERN
    store_dir: Path | None = None
    _testid_regex: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.allowed_layers:
            raise ConfigError("allowed_layers must not be empty")
        try:
            compiled = re.compile(self.testid_pattern)
        except re.error as e:
            raise ConfigError(f"testid_pattern is not a valid regex: {e}") from e
        object.__setattr__(self, "_testid_regex", compiled)

    @property
    def testid_regex(self) -> re.Pattern[str]:
        return self._testid_regex


DEFAULT_CONFIG = EngineConfig()


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def load_config(path: Path) -> EngineConfig:
    """
    Load configuration from TOML.

    Recognised tables: [validation] allowed_layers, testid_pattern;
    [store] dir (relative paths resolve against the config file).
    """
    import tomllib

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"{path}: {e}") from e

    validation = _coerce_dict(data.get("validation"))
    store = _coerce_dict(data.get("store"))

    layers_raw = validation.get("allowed_layers", list(DEFAULT_ALLOWED_LAYERS))
    if not isinstance(layers_raw, list) or not all(isinstance(x, str) for x in layers_raw):
        raise ConfigError("validation.allowed_layers must be a list of strings")

    pattern = validation.get("testid_pattern", DEFAULT_TESTID_PATTERN)
    if not isinstance(pattern, str):
        raise ConfigError("validation.testid_pattern must be a string")

    store_dir: Path | None = None
    raw_dir = store.get("dir")
    if isinstance(raw_dir, str) and raw_dir.strip():
        store_dir = Path(raw_dir)
        if not store_dir.is_absolute():
            store_dir = (path.parent / store_dir).resolve()

    return EngineConfig(
        allowed_layers=tuple(layers_raw),
        testid_pattern=pattern,
        store_dir=store_dir,
    )


def find_config(start: Path) -> Path | None:
    """Find a revgate.toml by walking up from `start`."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        candidate = p / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def find_store_dir(start: Path) -> Path | None:
    """Find an existing .revgate directory by walking up from `start`."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        candidate = p / DEFAULT_STORE_DIRNAME
        if candidate.is_dir():
            return candidate
    return None
