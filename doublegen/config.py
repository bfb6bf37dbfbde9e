"""doublegen Configuration: project-level .doublegenrc.yml support.

Loads configuration from .doublegenrc.yml (or .doublegenrc.yaml,
.doublegenrc.json) in the project root or any parent directory. Allows
projects to configure:
  - The marker type implementing every generated shadow trait
  - The name of the blanket type parameter in adapter impls
  - Indentation and output format of the generated code
  - Whether failures are reported as `compile_error!` items

Example .doublegenrc.yml:
    marker_type: crate::testing::Dummy
    blanket_param: D
    indent: 4
    format: rust
    emit_compile_error: true
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import yaml

from doublegen.adapter import DEFAULT_BLANKET_PARAM
from doublegen.errors import CompileError, config_error, syntax_error
from doublegen.placeholder import DEFAULT_MARKER_TYPE


FORMATS = ("rust", "json", "pretty")


@dataclass
class DoublegenConfig:
    """Project-level doublegen configuration."""
    # Path of the zero-sized type the placeholder impl is written for
    marker_type: str = DEFAULT_MARKER_TYPE
    # Type parameter of the blanket adapter impl
    blanket_param: str = DEFAULT_BLANKET_PARAM
    indent: int = 4
    # Output: "rust", "json", "pretty"
    format: str = "rust"
    emit_compile_error: bool = False


# ---------------------------------------------------------------------------
# Config file names (in priority order)
# ---------------------------------------------------------------------------

_CONFIG_FILES = [
    ".doublegenrc.yml",
    ".doublegenrc.yaml",
    ".doublegenrc.json",
]


def find_config(start_dir: str = ".") -> Optional[str]:
    """Find the nearest config file by walking up from start_dir."""
    current = os.path.abspath(start_dir)
    while True:
        for name in _CONFIG_FILES:
            path = os.path.join(current, name)
            if os.path.isfile(path):
                return path
        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent
    return None


def load_config(path: Optional[str] = None, start_dir: str = ".") -> DoublegenConfig:
    """Load configuration from a file.

    If no path is given, searches for a config file starting from start_dir.
    If no config file is found, returns defaults.
    """
    if path is None:
        path = find_config(start_dir)

    if path is None:
        return DoublegenConfig()

    with open(path, "r", encoding="utf-8") as f:
        content = f.read()

    try:
        if path.endswith(".json"):
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise CompileError(syntax_error(f"Malformed config file {path}: {e}")) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise CompileError(config_error("<root>", "a mapping", data, path))
    return _dict_to_config(data, path)


def _dict_to_config(data: Dict[str, Any], path: Optional[str] = None) -> DoublegenConfig:
    """Convert a parsed dict to DoublegenConfig."""
    config = DoublegenConfig()

    if "marker_type" in data:
        config.marker_type = _expect(data, "marker_type", str, path)
    if "blanket_param" in data:
        config.blanket_param = _expect(data, "blanket_param", str, path)
    if "indent" in data:
        config.indent = _expect(data, "indent", int, path)
    if "format" in data:
        fmt = _expect(data, "format", str, path)
        if fmt not in FORMATS:
            raise CompileError(config_error("format", " | ".join(FORMATS), fmt, path))
        config.format = fmt
    if "emit_compile_error" in data:
        config.emit_compile_error = _expect(data, "emit_compile_error", bool, path)

    return config


def _expect(data: Dict[str, Any], key: str, kind: type, path: Optional[str]) -> Any:
    value = data[key]
    # bool is an int subclass; `indent: true` is still a mistake
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise CompileError(config_error(key, kind.__name__, value, path))
    return value
