"""SpiralReality strided ndarray view package."""

from importlib.metadata import PackageNotFoundError, version

from .ndarray import ndarray
from .buffers import Complex64Array, Complex128Array


try:  # pragma: no cover - metadata is provided at build time
    __version__ = version("spiralreality-ndarray")
except PackageNotFoundError:  # pragma: no cover - fallback during development
    __version__ = "0.0.0.dev0"


__all__ = [
    "Complex64Array",
    "Complex128Array",
    "ndarray",
    "__version__",
]
