from __future__ import annotations

__all__ = [
    "Closing",
    "Container",
    "Manage",
    "NotReady",
    "Provider",
    "Provide",
    "as_",
    "inject",
    "providers",
    "containers",
    "required",
]

import functools
import typing as t

import dependency_injector.containers as containers
import dependency_injector.providers as providers
import dependency_injector.wiring as wiring
from dependency_injector.containers import Container
from dependency_injector.providers import Provider
from dependency_injector.wiring import ClassGetItemMeta, Closing, Provide, required, TypeModifier

P = t.ParamSpec("P")
TReturn = t.TypeVar("TReturn")


def inject(fn: t.Callable[P, TReturn]) -> t.Callable[P, TReturn]:  # noqa: E302
    reference_injections, reference_closing = wiring._fetch_reference_injections(fn)  # pyright: ignore [reportPrivateUsage] noqa: E501
    patched = wiring._get_patched(fn, reference_injections, reference_closing)  # pyright: ignore [reportPrivateUsage] noqa: E501

    # route handlers keep their own globals so pydantic can resolve the
    # forward refs in their signatures
    if fn.__module__.startswith("tubely.web") and hasattr(fn, "__globals__"):
        wrapper = functools.wraps(fn, updated=("__globals__",))
        return wrapper(patched)
    return patched


TAs = t.TypeVar("TAs")
T = t.TypeVar("T")


class Manage(object, metaclass=ClassGetItemMeta):
    """Shorthand for ``Closing[Provide[...]]``, for request-scoped resources."""

    def __new__(cls, provider: Provider[T] | Container | str):
        return Closing[Provide[provider]]

    @classmethod
    def __class_getitem__(cls, item: Provider[T] | Container | str):
        return cls(item)


def as_(type_: t.Type[TAs]) -> TypeModifier:  # noqa: E302
    """Return custom type modifier."""
    # replace wiring.as_ because that one has typing issues
    return TypeModifier(type_)


class NotReady(object):
    _instance: t.ClassVar[NotReady | None] = None

    def __new__(cls) -> NotReady:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "<NotReady>"
