# gpatlas/config.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
import os
import logging

# Read version from VERSION file
_version_file = os.path.join(os.path.dirname(__file__), "..", "VERSION")
try:
    with open(os.path.abspath(_version_file), "r") as f:
        __version__ = f.read().strip()
except FileNotFoundError:
    __version__ = "0.0.0"

_BACKENDS = ("numpy",)


class _GPAtlasConfig:
    def __init__(self):
        self.version = __version__
        self.backend = None
        self.dtype = float
        self.seed = 1234
        # logger lives in config
        self.logger = logging.getLogger("gpatlas")
        if not self.logger.handlers:
            h = logging.StreamHandler()
            h.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
            self.logger.addHandler(h)
        self.logger.setLevel(logging.INFO)

    def __str__(self):
        return (
            f"GPAtlasConfig("
            f"version={self.version}, "
            f"backend={self.backend}, "
            f"dtype={self.dtype}, "
            f"seed={self.seed})"
        )

    def __repr__(self):
        return (
            f"<GPAtlasConfig "
            f"version={self.version!r}, "
            f"backend={self.backend!r}, "
            f"dtype={self.dtype!r}, "
            f"seed={self.seed!r}>"
        )


_config = _GPAtlasConfig()


def get_config():
    return _config


def init_backend():
    """Idempotent. Store the backend name, set env for downstream imports."""
    if _config.backend is None:
        backend = os.environ.get("GPATLAS_BACKEND", "numpy")
        if backend not in _BACKENDS:
            raise RuntimeError(
                f"GPATLAS_BACKEND={backend!r} is not supported; use 'numpy'."
            )
        _config.backend = backend
        os.environ["GPATLAS_BACKEND"] = backend
    return _config.backend


def set_backend(backend: str):
    """Force a backend before importing gpatlas.num."""
    if backend not in _BACKENDS:
        raise ValueError("backend must be 'numpy'")
    _config.backend = backend
    os.environ["GPATLAS_BACKEND"] = backend


def get_backend():
    """Return current backend; triggers detection if not set."""
    return _config.backend or init_backend()


def set_seed(seed: int):
    """Set the seed used by the global generator of gpatlas.num."""
    import gpatlas.num as gnp

    _config.seed = seed
    gnp.set_seed(seed)


def get_logger():
    return _config.logger


def set_log_level(level):
    _config.logger.setLevel(level)
