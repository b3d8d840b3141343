"""
Runtime configuration for Blitz.

Configuration comes from environment variables, optionally seeded from a
`.env` file in the working directory (loaded with python-dotenv; variables
already present in the environment win).

Environment variables
---------------------
BLITZ_KERNEL : str, optional
    Default matrix-multiply kernel for layers that do not name one
    (`"blas"` or `"asm"`). Defaults to `"blas"`.
BLITZ_DEBUG : str, optional
    Enables DEBUG logging of matrix-multiply dimensions. Off unless set to
    something other than "", "0" or "false".
BLITZ_SEED : int, optional
    Fixed base seed for the default random state of every backend. When
    unset, seeds are mixed with wall-clock time.
BLITZ_DTYPE : str, optional
    Default element type name (`"float32"` or `"float64"`).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import os
from typing import Mapping, Optional

from dotenv import load_dotenv

KERNELS = ("blas", "asm")
DTYPES = ("float32", "float64")

_FALSE_STRINGS = ("", "0", "false")


def _parse_bool(raw: Optional[str]) -> bool:
    if raw is None:
        return False
    return raw.strip().lower() not in _FALSE_STRINGS


@dataclass(frozen=True)
class BlitzConfig:
    """
    Immutable runtime configuration.

    Attributes
    ----------
    kernel : str
        Default matrix-multiply kernel name.
    debug : bool
        Whether kernels log their dimensions at DEBUG level.
    seed : Optional[int]
        Fixed base seed, or None for time-mixed seeds.
    dtype : str
        Default element type name.
    """

    kernel: str = "blas"
    debug: bool = False
    seed: Optional[int] = None
    dtype: str = "float32"

    def __post_init__(self) -> None:
        if self.kernel not in KERNELS:
            raise ValueError(
                f"Unsupported kernel {self.kernel!r}. Expected one of {KERNELS}"
            )
        if self.dtype not in DTYPES:
            raise ValueError(
                f"Unsupported dtype {self.dtype!r}. Expected one of {DTYPES}"
            )

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        *,
        dotenv_path: Optional[str] = None,
    ) -> "BlitzConfig":
        """
        Build a config from environment variables.

        Parameters
        ----------
        environ:
            Mapping to read instead of `os.environ`. When given, no `.env`
            file is loaded.
        dotenv_path:
            Explicit `.env` location. Defaults to python-dotenv's lookup.

        Raises
        ------
        ValueError
            If a variable holds an invalid value.
        """
        if environ is None:
            load_dotenv(dotenv_path=dotenv_path, override=False)
            environ = os.environ

        raw_seed = environ.get("BLITZ_SEED", "").strip()
        if raw_seed:
            try:
                seed: Optional[int] = int(raw_seed)
            except ValueError as e:
                raise ValueError(f"BLITZ_SEED must be an integer, got {raw_seed!r}") from e
        else:
            seed = None

        return cls(
            kernel=environ.get("BLITZ_KERNEL", "blas").strip() or "blas",
            debug=_parse_bool(environ.get("BLITZ_DEBUG")),
            seed=seed,
            dtype=environ.get("BLITZ_DTYPE", "float32").strip() or "float32",
        )

    def with_overrides(self, **changes) -> "BlitzConfig":
        """Return a copy with the given fields replaced (validated again)."""
        return replace(self, **changes)


_CONFIG: Optional[BlitzConfig] = None


def get_config() -> BlitzConfig:
    """Return the process-wide config, loading it from the environment once."""
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = BlitzConfig.from_env()
    return _CONFIG


def set_config(config: Optional[BlitzConfig]) -> None:
    """Replace the process-wide config. `None` forces a reload on next access."""
    global _CONFIG
    _CONFIG = config


__all__ = [
    BlitzConfig.__name__,
    get_config.__name__,
    set_config.__name__,
    "KERNELS",
    "DTYPES",
]
