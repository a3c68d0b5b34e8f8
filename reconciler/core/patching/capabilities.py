from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol, Tuple, Type, runtime_checkable

# setter names tried on configuration objects, in order
NAMESPACE_SETTER_NAMES: Tuple[str, ...] = ("set_namespace", "setNamespace")


@runtime_checkable
class NamespaceConfigurable(Protocol):
    def set_namespace(self, value: str) -> None:
        ...


@dataclass(frozen=True)
class CapabilityLookup:
    capability: Optional[NamespaceConfigurable]
    reason: Optional[str] = None

    @property
    def available(self) -> bool:
        return self.capability is not None


class _SetterAdapter:
    """Wraps a single-string setter found on a configuration object."""

    def __init__(self, target: Any, setter_name: str, setter: Callable[[str], Any]):
        self.target = target
        self.setter_name = setter_name
        self._setter = setter

    def set_namespace(self, value: str) -> None:
        self._setter(value)

    def __repr__(self) -> str:
        return f"_SetterAdapter({type(self.target).__name__}.{self.setter_name})"


_ADAPTERS: Dict[Type[Any], Callable[[Any], NamespaceConfigurable]] = {}


def register_namespace_adapter(
    config_type: Type[Any],
    factory: Callable[[Any], NamespaceConfigurable],
) -> None:
    """Host hook: teach the lookup how to adapt a third-party config type."""
    _ADAPTERS[config_type] = factory


def unregister_namespace_adapter(config_type: Type[Any]) -> None:
    _ADAPTERS.pop(config_type, None)


def _accepts_single_string(fn: Callable[..., Any]) -> bool:
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return False

    params = [
        p for p in sig.parameters.values()
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    ]
    if len(params) != 1:
        return False

    ann = params[0].annotation
    return ann is inspect.Parameter.empty or ann is str or ann == "str"


def lookup_namespace_capability(config: Any) -> CapabilityLookup:
    """
    Never raises: a config or adapter that blows up while being probed is
    reported as an absent capability.
    """
    if config is None:
        return CapabilityLookup(None, "configuration object is missing")

    try:
        return _probe(config)
    except Exception as e:
        return CapabilityLookup(None, f"capability lookup failed: {e!r}")


def _probe(config: Any) -> CapabilityLookup:
    for config_type, factory in _ADAPTERS.items():
        if isinstance(config, config_type):
            return CapabilityLookup(factory(config))

    for setter_name in NAMESPACE_SETTER_NAMES:
        setter = getattr(config, setter_name, None)
        if setter is None or not callable(setter):
            continue
        if not _accepts_single_string(setter):
            continue
        if setter_name == "set_namespace" and isinstance(config, NamespaceConfigurable):
            return CapabilityLookup(config)
        return CapabilityLookup(_SetterAdapter(config, setter_name, setter))

    return CapabilityLookup(
        None,
        f"{type(config).__name__} exposes no {' / '.join(NAMESPACE_SETTER_NAMES)}(str)",
    )
