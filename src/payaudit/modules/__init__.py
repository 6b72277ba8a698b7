"""Feature modules with auto-discovery."""

from importlib import import_module
from pathlib import Path

import structlog
from fastapi import APIRouter


log = structlog.get_logger()


def discover_modules() -> list[APIRouter]:
    """Return the routers of all feature modules that expose one.

    Scans this package for subpackages with a ``router`` attribute in
    their ``__init__.py``.
    """
    modules_dir = Path(__file__).parent
    routers: list[APIRouter] = []

    for path in sorted(modules_dir.iterdir()):
        if path.is_dir() and not path.name.startswith("_"):
            module = import_module(f"payaudit.modules.{path.name}")
            if hasattr(module, "router"):
                routers.append(module.router)
                log.debug("module_loaded", module=path.name)

    return routers
