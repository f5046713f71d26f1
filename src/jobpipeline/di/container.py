"""Dependency-injection container used to build jobs and invoke their handlers."""

from __future__ import annotations

import inspect
import logging
import types
from typing import Annotated, Any, Callable, Sequence, Union, get_args, get_origin

from jobpipeline.core.exceptions import BindingResolutionError

logger = logging.getLogger(__name__)

_MISSING = object()
_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def _describe(target: Any) -> str:
    return getattr(target, "__qualname__", None) or repr(target)


def _signature(target: Callable[..., Any]) -> inspect.Signature | None:
    """Return the signature with string annotations evaluated where possible."""
    try:
        return inspect.signature(target, eval_str=True)
    except (NameError, SyntaxError):
        pass
    except (ValueError, TypeError):
        return None
    try:
        return inspect.signature(target)
    except (ValueError, TypeError):
        return None


class Container:
    """Process-wide bindings plus construction and invocation helpers.

    Bindings are keyed by type or by name. ``make`` builds a class from
    positional arguments and fills the rest of its constructor from bindings;
    ``call`` invokes a callable, matching each parameter against a list of
    available values by type, then bindings, then position.
    """

    def __init__(self) -> None:
        self._factories: dict[type | str, Callable[[Container], Any]] = {}
        self._instances: dict[type | str, Any] = {}
        self._instances[Container] = self

    def bind(self, key: type | str, factory: Callable[[Container], Any]) -> None:
        """Register a factory called with the container on every resolution."""
        self._instances.pop(key, None)
        self._factories[key] = factory

    def instance(self, key: type | str, value: Any) -> None:
        """Register a shared value."""
        self._factories.pop(key, None)
        self._instances[key] = value

    def bound(self, key: Any) -> bool:
        try:
            return key in self._instances or key in self._factories
        except TypeError:  # unhashable annotation
            return False

    def resolve(self, key: type | str) -> Any:
        if key in self._instances:
            return self._instances[key]
        if key in self._factories:
            return self._factories[key](self)
        raise BindingResolutionError(_describe(key), str(key), "nothing is bound")

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def make(self, cls: type, *args: Any) -> Any:
        """Build ``cls`` with ``args`` spread over its leading positional parameters.

        Surplus arguments the constructor cannot accept are dropped. Parameters
        left over after the arguments run out come from bindings or defaults.
        """
        sig = _signature(cls)
        if sig is None:
            return cls(*args)

        remaining = list(args)
        positional: list[Any] = []
        keywords: dict[str, Any] = {}
        for param in sig.parameters.values():
            if param.kind is inspect.Parameter.VAR_POSITIONAL:
                positional.extend(remaining)
                remaining = []
                continue
            if param.kind is inspect.Parameter.VAR_KEYWORD:
                continue
            if param.kind in _POSITIONAL and remaining:
                positional.append(remaining.pop(0))
                continue
            value = self._from_bindings(param)
            if value is _MISSING:
                value = self._default(cls, param)
            if param.kind in _POSITIONAL:
                positional.append(value)
            else:
                keywords[param.name] = value

        if remaining:
            logger.debug("Dropping %d surplus argument(s) for %s", len(remaining), _describe(cls))
        return cls(*positional, **keywords)

    # ------------------------------------------------------------------
    # Invocation
    # ------------------------------------------------------------------

    def call(self, func: Callable[..., Any], values: Sequence[Any] = ()) -> Any:
        """Invoke ``func``, resolving its parameters from ``values`` and bindings."""
        sig = _signature(func)
        if sig is None:
            return func(*values)

        unused = list(values)
        positional: list[Any] = []
        keywords: dict[str, Any] = {}
        for param in sig.parameters.values():
            if param.kind is inspect.Parameter.VAR_POSITIONAL:
                positional.extend(unused)
                unused = []
                continue
            if param.kind is inspect.Parameter.VAR_KEYWORD:
                continue
            value = self._from_values(param, unused)
            if value is _MISSING:
                value = self._from_bindings(param)
            if value is _MISSING and not _match_types(param.annotation) and unused:
                value = unused.pop(0)
            if value is _MISSING:
                value = self._default(func, param)
            if param.kind in _POSITIONAL:
                positional.append(value)
            else:
                keywords[param.name] = value
        return func(*positional, **keywords)

    # ------------------------------------------------------------------
    # Parameter resolution
    # ------------------------------------------------------------------

    @staticmethod
    def _from_values(param: inspect.Parameter, unused: list[Any]) -> Any:
        classes = _match_types(param.annotation)
        if not classes:
            return _MISSING
        for index, value in enumerate(unused):
            try:
                matches = isinstance(value, classes)
            except TypeError:
                return _MISSING
            if matches:
                return unused.pop(index)
        return _MISSING

    def _from_bindings(self, param: inspect.Parameter) -> Any:
        if _is_typed(param) and self.bound(param.annotation):
            return self.resolve(param.annotation)
        if self.bound(param.name):
            return self.resolve(param.name)
        return _MISSING

    @staticmethod
    def _default(target: Any, param: inspect.Parameter) -> Any:
        if param.default is not inspect.Parameter.empty:
            return param.default
        raise BindingResolutionError(_describe(target), param.name)


def _is_typed(param: inspect.Parameter) -> bool:
    annotation = param.annotation
    return annotation is not inspect.Parameter.empty and annotation is not Any and not isinstance(annotation, str)


def _match_types(annotation: Any) -> tuple[type, ...]:
    """Classes a value must be an instance of to satisfy ``annotation``.

    Generics match on their origin (``list[int]`` -> ``list``), unions on any
    member. An empty result means the annotation names no concrete class and
    the parameter is filled positionally, like an unannotated one.
    """
    if annotation is inspect.Parameter.empty or annotation is Any or isinstance(annotation, str):
        return ()
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        members = [_match_types(member) for member in get_args(annotation)]
        if not all(members):  # a member such as Any accepts anything
            return ()
        return tuple(t for classes in members for t in classes)
    if origin is Annotated:
        return _match_types(get_args(annotation)[0])
    if origin is not None:
        annotation = origin
    if isinstance(annotation, type) and annotation is not Any:
        return (annotation,)
    return ()
