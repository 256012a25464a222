"""
Library-wide settings for forestcg.

Holds the instance directory, the log level, the LP backend name, the
numerical tolerances shared by preprocessing, pricing and the read-back
helpers, and the defaults of the geometry based edge cut.

Settings come from, in increasing priority:
1. Built-in defaults
2. A settings file (./forestcg.toml, else ~/.forestcg/config.toml)
3. The FORESTCG_DATA_PATH environment variable (instance directory only)
4. Attribute assignment on the module level ``config`` object

Example:
    >>> from forestcg.config import config
    >>> config.epsilon_pricing
    1e-06
    >>> config.set_tolerance("weights", 1e-9)
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Tuple, Union

DATA_PATH_ENV = "FORESTCG_DATA_PATH"
FALLBACK_TOLERANCE = 1e-6

LOCAL_SETTINGS = Path("forestcg.toml")
USER_SETTINGS = Path.home() / ".forestcg" / "config.toml"


def _instance_dir() -> Path:
    override = os.environ.get(DATA_PATH_ENV)
    if override:
        return Path(override)
    # <repo>/data next to the package directory
    return Path(__file__).resolve().parent.parent / "data"


def _tolerance_defaults() -> Dict[str, float]:
    return {
        "weights": 1e-6,            # capacity against path weight
        "pricing": 1e-6,            # column acceptance
        "color_interpolate": 1e-4,  # snapping of utilisation values
    }


@dataclass
class ForestCGConfig:
    """
    Settings object shared by the whole package.

    Attributes:
        data_path: Directory scanned by the batch runner
        log_level: Level name applied by configure_logging
        default_solver: Restricted master backend (only "highs" ships)
        tolerances: Named epsilons, see the epsilon_* properties
        geometry_cut_scale: Fraction of the MST weight used as neighbourhood radius
        geometry_cut_degree: Nearest neighbours every vertex keeps
    """

    data_path: Path = field(default_factory=_instance_dir)
    log_level: str = "INFO"
    default_solver: str = "highs"
    tolerances: Dict[str, float] = field(default_factory=_tolerance_defaults)
    geometry_cut_scale: float = 0.5
    geometry_cut_degree: int = 3

    def __post_init__(self):
        self.data_path = Path(self.data_path)

    # -- tolerances ---------------------------------------------------------

    @property
    def epsilon_weights(self) -> float:
        return self.get_tolerance("weights")

    @property
    def epsilon_pricing(self) -> float:
        return self.get_tolerance("pricing")

    @property
    def epsilon_color_interpolate(self) -> float:
        return self.get_tolerance("color_interpolate")

    def get_tolerance(self, name: str) -> float:
        return self.tolerances.get(name, FALLBACK_TOLERANCE)

    def set_tolerance(self, name: str, value: float) -> None:
        self.tolerances[name] = float(value)

    # -- persistence --------------------------------------------------------

    def _sections(self) -> Dict[str, Dict[str, Any]]:
        return {
            "paths": {"data_path": str(self.data_path)},
            "general": {"log_level": self.log_level, "default_solver": self.default_solver},
            "preprocessing": {
                "geometry_cut_scale": self.geometry_cut_scale,
                "geometry_cut_degree": self.geometry_cut_degree,
            },
            "tolerances": dict(self.tolerances),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Flatten every section except tolerances into one mapping."""
        flat: Dict[str, Any] = {}
        for section, values in self._sections().items():
            if section == "tolerances":
                flat[section] = values
            else:
                flat.update(values)
        return flat

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ForestCGConfig":
        merged = _tolerance_defaults()
        merged.update({k: float(v) for k, v in d.get("tolerances", {}).items()})

        defaults = cls()
        return cls(
            data_path=Path(d.get("data_path", defaults.data_path)),
            log_level=str(d.get("log_level", defaults.log_level)),
            default_solver=str(d.get("default_solver", defaults.default_solver)),
            tolerances=merged,
            geometry_cut_scale=float(d.get("geometry_cut_scale", defaults.geometry_cut_scale)),
            geometry_cut_degree=int(d.get("geometry_cut_degree", defaults.geometry_cut_degree)),
        )

    def save(self, path: Optional[Path] = None) -> None:
        """Write the settings as a flat TOML file (default ./forestcg.toml)."""
        out = ["# forestcg settings"]
        for section, values in self._sections().items():
            out.append("")
            out.append(f"[{section}]")
            out.extend(f"{key} = {_toml_value(value)}" for key, value in values.items())
        Path(path or LOCAL_SETTINGS).write_text("\n".join(out) + "\n")

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "ForestCGConfig":
        """
        Read settings written by save().

        Without a path the local file wins over the per-user one. A missing
        file yields the defaults.
        """
        if path is None:
            path = next((p for p in (LOCAL_SETTINGS, USER_SETTINGS) if p.exists()), None)
        if path is None or not Path(path).exists():
            return cls()

        flat: Dict[str, Any] = {"tolerances": {}}
        for section, key, value in _read_toml(Path(path)):
            if section == "tolerances":
                flat["tolerances"][key] = value
            else:
                flat[key] = value
        return cls.from_dict(flat)


def _toml_value(value: Any) -> str:
    if isinstance(value, str):
        return f'"{value}"'
    return repr(value)


def _read_toml(path: Path) -> Iterator[Tuple[Optional[str], str, Any]]:
    """Yield (section, key, value) for the subset of TOML save() emits."""
    section = None
    for raw in path.read_text().splitlines():
        entry = raw.strip()
        if not entry or entry[0] == "#":
            continue
        if entry[0] == "[" and entry[-1] == "]":
            section = entry[1:-1].strip()
            continue
        key, sep, text = entry.partition("=")
        if not sep:
            continue
        text = text.strip()
        if text.startswith('"'):
            value: Any = text.strip('"')
        else:
            try:
                value = int(text)
            except ValueError:
                try:
                    value = float(text)
                except ValueError:
                    value = text
        yield section, key.strip(), value


config = ForestCGConfig()


def set_data_path(path: Union[str, Path]) -> None:
    """Point the batch runner at another instance directory."""
    config.data_path = Path(path)


def get_data_path() -> Path:
    return config.data_path


def configure_logging(level: Optional[str] = None) -> None:
    """
    Attach a stream handler to the ``forestcg`` logger and set its level.

    Calling it again only changes the level.

    Args:
        level: Level name, case-insensitive (default: config.log_level)
    """
    root = logging.getLogger("forestcg")
    root.setLevel(getattr(logging, (level or config.log_level).upper(), logging.INFO))
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
        root.addHandler(handler)
