"""Value sources: configuration values that are resolved against a model.

``wrap`` turns a configured value tree into a ``ValueSource`` tree once;
``resolve(model)`` then produces a fresh value for each document:

* strings become templates (rendered against the model)
* maps render their keys and resolve their values
* lists resolve each element
* every other value is deep-copied as-is

Example::

    src = wrap({"user_${kind}": ["${name}", 1]})
    src.resolve({"kind": "admin", "name": "Bob"})
    # → {"user_admin": ["Bob", 1]}
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from .core import TemplateRenderer, ValueSource
from .errors import UnsupportedValueType
from .templates import compile_template
from .values import ValueKind, deep_copy, kind_of


class ObjectValue(ValueSource):
    """A literal value; each resolution returns an independent copy."""

    def __init__(self, value: Any) -> None:
        self.value = value

    def resolve(self, model: Mapping[str, Any]) -> Any:
        return deep_copy(self.value)

    def __repr__(self) -> str:
        return f"ObjectValue({self.value!r})"


class TemplateValue(ValueSource):
    def __init__(self, template: TemplateRenderer) -> None:
        self.template = template

    def resolve(self, model: Mapping[str, Any]) -> Any:
        return self.template.render(model)

    def __repr__(self) -> str:
        return f"TemplateValue({self.template!r})"


class ListValue(ValueSource):
    def __init__(self, items: List[ValueSource]) -> None:
        self.items = items

    def resolve(self, model: Mapping[str, Any]) -> Any:
        return [item.resolve(model) for item in self.items]

    def __repr__(self) -> str:
        return f"ListValue({self.items!r})"


class MapValue(ValueSource):
    def __init__(self, entries: Dict[TemplateRenderer, ValueSource]) -> None:
        self.entries = entries

    def resolve(self, model: Mapping[str, Any]) -> Any:
        return {key.render(model): value.resolve(model) for key, value in self.entries.items()}

    def __repr__(self) -> str:
        return f"MapValue({self.entries!r})"


def wrap(value: Any, **template_kwargs: Any) -> ValueSource:
    """Build the ``ValueSource`` tree for a configured *value*.

    ``template_kwargs`` are forwarded to every ``Template`` created.

    Raises:
        UnsupportedValueType: *value* contains a type outside the value model.
    """
    if isinstance(value, ValueSource):
        return value
    if isinstance(value, TemplateRenderer):
        return TemplateValue(value)

    kind = kind_of(value)
    if kind is ValueKind.STRING:
        return TemplateValue(compile_template(value, **template_kwargs))
    if kind is ValueKind.LIST:
        return ListValue([wrap(item, **template_kwargs) for item in value])
    if kind is ValueKind.MAP:
        for key in value:
            if not isinstance(key, str):
                raise UnsupportedValueType(key)
        return MapValue({
            compile_template(key, **template_kwargs): wrap(item, **template_kwargs)
            for key, item in value.items()
        })
    return ObjectValue(value)
