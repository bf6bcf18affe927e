"""Project-side conveniences around the cache.

Status bookkeeping, compiler path mapping so editors see cached modules under
their URLs, host preload configuration, and linking a project-local cache
root to the global one. None of this is needed to load modules.
"""

from __future__ import annotations

import json
import time
from email.utils import formatdate
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from httpimport.errors import PersistenceError
from httpimport.models.status import Status
from httpimport.store import write_atomic

if TYPE_CHECKING:
    from httpimport.config import Settings

log = structlog.get_logger()

DEFAULT_COMPILER_OPTIONS: dict = {
    "module": "ESNext",
    "target": "ESNext",
    "moduleResolution": "Bundler",
    "allowImportingTsExtensions": True,
    "allowArbitraryExtensions": True,
    "noEmit": True,
    "strict": True,
    "declaration": True,
    "isolatedDeclarations": True,
    "verbatimModuleSyntax": True,
    "skipDefaultLibCheck": True,
    "resolveJsonModule": True,
    "paths": {},
}


def _write_text(path: Path, text: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        write_atomic(path, text.encode("utf-8"))
    except OSError as exc:
        raise PersistenceError(str(path), str(exc)) from exc


# ---------------------------------------------------------------------------
# Status file
# ---------------------------------------------------------------------------


def write_status(settings: Settings, version: str) -> Status:
    """Record a successful initialisation at ``<root>/status.json``."""
    now = time.time()
    status = Status(
        version=version,
        timestamp=int(now * 1000),
        date=formatdate(now, usegmt=True),
        root_path=str(settings.cache.root_dir),
        cache_path=str(settings.cache.cache_dir),
        meta_path=str(settings.cache.meta_dir),
    )
    _write_text(settings.cache.status_path, status.model_dump_json(indent=4))
    log.info("status_written", path=str(settings.cache.status_path), version=version)
    return status


def read_status(path: Path) -> Status | None:
    """Return the recorded status, or ``None`` if the root was never initialised."""
    try:
        return Status.model_validate_json(path.read_bytes())
    except (OSError, ValueError):
        return None


# ---------------------------------------------------------------------------
# Compiler path mapping
# ---------------------------------------------------------------------------


def _display_path(path: Path, cwd: Path) -> str:
    """``./relative`` when ``path`` is under ``cwd``, absolute otherwise."""
    try:
        return "./" + path.relative_to(cwd).as_posix()
    except ValueError:
        return path.as_posix()


def ensure_compiler_paths(
    tsconfig_path: Path,
    cache_dir: Path,
    cwd: Path,
    *,
    force: bool = False,
) -> bool:
    """Map ``http://*``, ``https://*`` and ``web:*`` onto the cache in tsconfig.json.

    Creates a default tsconfig.json when there is none. An existing file that
    is not plain JSON is left alone. Returns True when the file was written.
    """
    if tsconfig_path.exists():
        try:
            tsconfig = json.loads(tsconfig_path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            log.warning("tsconfig_unreadable", path=str(tsconfig_path), exc_info=True)
            return False
    else:
        tsconfig = {"compilerOptions": dict(DEFAULT_COMPILER_OPTIONS, paths={})}

    # Either key may be present but null.
    compiler_options = tsconfig.get("compilerOptions") or {}
    tsconfig["compilerOptions"] = compiler_options
    paths = compiler_options.get("paths") or {}
    compiler_options["paths"] = paths

    if not force and all(key in paths for key in ("http://*", "https://*", "web:*")):
        return False

    base = _display_path(cache_dir, cwd)
    paths["http://*"] = [f"{base}/http/*"]
    paths["https://*"] = [f"{base}/https/*"]
    paths["web:*"] = [*paths["http://*"], *paths["https://*"]]

    _write_text(tsconfig_path, json.dumps(tsconfig, indent=4))
    log.info("tsconfig_paths_written", path=str(tsconfig_path), cache=base)
    return True


# ---------------------------------------------------------------------------
# Host preload and linking
# ---------------------------------------------------------------------------


def ensure_preload(config_path: Path, module: str) -> bool:
    """Write ``preload = ["<module>"]`` when the host config file does not exist yet."""
    if config_path.exists():
        log.debug("preload_config_exists", path=str(config_path))
        return False
    _write_text(config_path, f'preload = ["{module}"]\n')
    log.info("preload_config_written", path=str(config_path), module=module)
    return True


def link_global(global_root: Path, local_root: Path) -> bool:
    """Make ``local_root`` a symlink to ``global_root``. Non-fatal on failure."""
    try:
        local_root.symlink_to(global_root, target_is_directory=True)
    except OSError as exc:
        log.warning(
            "link_global_failed",
            source=str(global_root),
            target=str(local_root),
            error=str(exc),
        )
        return False
    log.info("link_global_created", source=str(global_root), target=str(local_root))
    return True
