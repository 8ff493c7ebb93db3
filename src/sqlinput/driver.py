"""
Load-once injection of external driver library paths.

A driver path is a directory holding DBAPI driver packages that are not
installed in the running environment. It is added as a site directory (so
.pth files are honoured) the first time a connection asks for it. Each path
is loaded at most once per process; concurrent first loads of one path are
serialized while loads of distinct paths proceed independently.
"""
import importlib
import logging
import pathlib
import site
import threading

from sqlinput.exceptions import ConnectionFailure

__all__ = ['ensure_driver', 'loaded_driver_paths']

logger = logging.getLogger(__name__)

_loaded_paths: set[str] = set()
_path_locks: dict[str, threading.Lock] = {}
_path_locks_lock = threading.Lock()


def _lock_for(path: str) -> threading.Lock:
    with _path_locks_lock:
        return _path_locks.setdefault(path, threading.Lock())


def ensure_driver(driver_path: str) -> bool:
    """Add `driver_path` to the import path unless already loaded.

    Returns True when this call loaded the path, False when it was
    already loaded.

    Raises
        ConnectionFailure: If the path is not an existing directory
    """
    path = str(pathlib.Path(driver_path).expanduser().resolve())
    if path in _loaded_paths:
        return False
    with _lock_for(path):
        if path in _loaded_paths:
            return False
        if not pathlib.Path(path).is_dir():
            raise ConnectionFailure(f'Driver path is not a directory: {driver_path}')
        site.addsitedir(path)
        importlib.invalidate_caches()
        _loaded_paths.add(path)
        logger.debug(f'Loaded driver path {path}')
        return True


def loaded_driver_paths() -> frozenset[str]:
    """Paths loaded so far in this process."""
    return frozenset(_loaded_paths)
