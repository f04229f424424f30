"""Prefixed filter namespaces.

A plugin's filter modules are wrapped in a generated class whose methods are
named ``<prefix>_<filter>``. Each method looks up the passthrough object for
its prefix in the current Jinja2 context and calls the original filter on it
through the ``filter_method_called`` hook.
"""

import inspect
import logging
import threading
import weakref
from types import ModuleType
from typing import Any, Callable, Iterable, Optional, Union

from jinja2 import pass_context
from jinja2.runtime import Context

from plugspace.core.naming import prefixed_name, validate_prefix

logger = logging.getLogger(__name__)

FilterModule = Union[type, ModuleType]


class FilterPassthrough:
    """Object the original filters are called on.

    Class-based filter modules are mixed into a subclass of this one, so
    their methods can read ``self.context``. Names missing from those
    classes fall back to the functions of module-based filter modules.
    """

    def __init__(self, prefix: str, modules: tuple[FilterModule, ...], context: Optional[Context] = None):
        self.prefix = prefix
        self.modules = modules
        self.context = context

    # Weak so the per-context cache in PrefixedFilterModule can drop finished renders
    @property
    def context(self) -> Optional[Context]:
        ref = self.__dict__.get("_context_ref")
        return ref() if ref is not None else None

    @context.setter
    def context(self, context: Optional[Context]) -> None:
        self.__dict__["_context_ref"] = weakref.ref(context) if context is not None else None

    def __getattr__(self, name: str) -> Any:
        for module in self.__dict__.get("modules", ()):
            if isinstance(module, ModuleType) and name in filter_method_names(module):
                return getattr(module, name)
        raise AttributeError(f"{type(self).__name__!r} object has no filter {name!r}")


_RESERVED_NAMES = frozenset(vars(FilterPassthrough)) | {"prefix", "modules", "context"}


def filter_method_names(module: FilterModule) -> list[str]:
    """Return the public filter names a filter module defines.

    Raises:
        TypeError: If module is neither a class nor a Python module
    """
    if isinstance(module, ModuleType):
        names = getattr(module, "__all__", None)
        if names is None:
            names = [
                name for name, obj in vars(module).items()
                if inspect.isfunction(obj) and obj.__module__ == module.__name__
            ]
        return [
            name for name in names
            if not name.startswith("_")
            and name not in _RESERVED_NAMES
            and callable(getattr(module, name, None))
        ]

    if isinstance(module, type):
        return [
            name for name in dir(module)
            if not name.startswith("_")
            and name not in _RESERVED_NAMES
            and inspect.isfunction(getattr(module, name))
        ]

    raise TypeError(f"Filter module must be a class or a module, got {type(module).__name__}")


def normalize_filter_modules(modules: Union[None, FilterModule, Iterable[FilterModule]]) -> tuple[FilterModule, ...]:
    """Turn the value of ``Plugin.filter_modules()`` into a tuple."""
    if modules is None:
        return ()
    if isinstance(modules, (type, ModuleType)):
        return (modules,)
    result = tuple(modules)
    for module in result:
        if not isinstance(module, (type, ModuleType)):
            raise TypeError(f"Filter module must be a class or a module, got {type(module).__name__}")
    return result


def build_passthrough_class(modules: tuple[FilterModule, ...]) -> type[FilterPassthrough]:
    """Mix the class-based filter modules into a FilterPassthrough subclass."""
    bases = tuple(module for module in modules if isinstance(module, type))
    return type("FilterPassthrough", (FilterPassthrough,) + bases, {})


class PrefixedFilterModule:
    """Base class of generated prefixed filter namespaces.

    Several generated namespaces can be composed into one object with
    ``compose_filter_modules``. Passthrough objects are kept per render
    context and per prefix, so each render only ever sees its own context.
    """

    _prefixed_names: tuple[str, ...] = ()

    def __init__(self):
        self._passthrough_objects: weakref.WeakKeyDictionary[Context, dict[str, FilterPassthrough]] = (
            weakref.WeakKeyDictionary()
        )
        self._lock = threading.Lock()

    def filter_method_called(self, prefix: str, name: str, call: Callable[[], Any]) -> Any:
        """Hook run around every prefixed filter call.

        Args:
            prefix: Prefix of the namespace the filter belongs to
            name: Original (unprefixed) filter name
            call: Performs the original filter call

        Returns:
            The filter result
        """
        return call()

    @classmethod
    def filter_names(cls) -> list[str]:
        """Prefixed filter names defined by this namespace."""
        names: list[str] = []
        for klass in cls.__mro__:
            for name in vars(klass).get("_prefixed_names", ()):
                if name not in names:
                    names.append(name)
        return names

    def filters(self) -> dict[str, Callable[..., Any]]:
        """Map prefixed filter names to bound methods for Environment.filters."""
        return {name: getattr(self, name) for name in self.filter_names()}

    def passthrough_objects(self, context: Optional[Context]) -> dict[str, FilterPassthrough]:
        """Passthrough objects created for one render context, keyed by prefix."""
        if context is None:
            return {}
        with self._lock:
            objects = self._passthrough_objects.get(context)
            if objects is None:
                objects = {}
                self._passthrough_objects[context] = objects
            return objects

    def passthrough_object(
        self,
        prefix: str,
        passthrough_class: type[FilterPassthrough],
        modules: tuple[FilterModule, ...],
        context: Optional[Context],
    ) -> FilterPassthrough:
        """Return the passthrough object for prefix in context."""
        objects = self.passthrough_objects(context)
        passthrough = objects.get(prefix)
        if passthrough is None:
            passthrough = passthrough_class(prefix, modules, context)
            objects[prefix] = passthrough
        return passthrough


def _make_filter_method(
    prefix: str,
    name: str,
    passthrough_class: type[FilterPassthrough],
    modules: tuple[FilterModule, ...],
) -> Callable[..., Any]:
    @pass_context
    def filter_method(self: PrefixedFilterModule, context: Context, *args: Any, **kwargs: Any) -> Any:
        passthrough = self.passthrough_object(prefix, passthrough_class, modules, context)
        return self.filter_method_called(
            prefix,
            name,
            lambda: getattr(passthrough, name)(*args, **kwargs),
        )

    filter_method.__name__ = prefixed_name(prefix, name)
    filter_method.__qualname__ = f"PrefixedFilterModule.{filter_method.__name__}"
    return filter_method


def prefixed_filter_module(
    modules: Union[None, FilterModule, Iterable[FilterModule]],
    prefix: str,
) -> type[PrefixedFilterModule]:
    """Generate a prefixed namespace for a set of filter modules.

    Class-based modules take precedence over module-based ones when both
    define a filter name; within each kind the first listed module wins.

    Args:
        modules: One filter module, several, or None
        prefix: Namespace prefix

    Returns:
        A PrefixedFilterModule subclass defining ``<prefix>_<filter>`` methods
    """
    prefix = validate_prefix(prefix)
    modules = normalize_filter_modules(modules)
    passthrough_class = build_passthrough_class(modules)

    attrs: dict[str, Any] = {}
    names: list[str] = []
    for module in modules:
        for name in filter_method_names(module):
            method_name = prefixed_name(prefix, name)
            if method_name in attrs:
                continue
            attrs[method_name] = _make_filter_method(prefix, name, passthrough_class, modules)
            names.append(method_name)
    attrs["_prefixed_names"] = tuple(names)

    namespace = type(f"PrefixedFilterModule_{prefix}", (PrefixedFilterModule,), attrs)
    logger.debug("Generated filter namespace %s: %s", namespace.__name__, ", ".join(names) or "(empty)")
    return namespace


def compose_filter_modules(*namespaces: type[PrefixedFilterModule]) -> PrefixedFilterModule:
    """Mix several prefixed namespaces into a single object."""
    for namespace in namespaces:
        if not (isinstance(namespace, type) and issubclass(namespace, PrefixedFilterModule)):
            raise TypeError(f"Expected a prefixed filter module, got {namespace!r}")
    if not namespaces:
        return PrefixedFilterModule()
    if len(namespaces) == 1:
        return namespaces[0]()
    strainer_class = type("FilterStrainer", tuple(namespaces), {})
    return strainer_class()
