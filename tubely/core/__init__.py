import importlib
import typing as t

__all__ = [
    "BootConfiguration",
    "di",
    "TubelyContainer",
    "LoggingProvider",
    "Settings",
    "Secrets",
    "TimestampProvider",
]


from . import di
from .config import Secrets, Settings
from .provider import LoggingProvider, TimestampProvider

if t.TYPE_CHECKING:
    from .container import BootConfiguration, TubelyContainer


def __getattr__(name: str) -> t.Any:
    # the containers import the modules they assemble, which themselves import
    # `di` from here, so they load on first use
    if name in ("BootConfiguration", "TubelyContainer"):
        container = importlib.import_module(f"{__name__}.container")
        return getattr(container, name)
    raise AttributeError(f"module {__name__} has no attribute {name}")
