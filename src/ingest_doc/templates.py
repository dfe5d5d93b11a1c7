"""Template rendering: everything that touches ``${…}`` syntax.

A ``Template`` is a string with ``${expr}`` placeholders.  Each ``expr`` is
a JMESPath expression evaluated against the render model, which for a
document is built by ``IngestDocument.create_template_model``::

    {<body fields…>, "_source": <body>, "_ingest": <pipeline metadata>}

so ``"logs-${_ingest.timestamp}"`` or ``"${user.name}"`` both work.

Rendering of a resolved value
-----------------------------
* ``None``        → ``""``
* ``str``         → itself
* ``bool``        → ``true`` / ``false``
* map / list      → JSON
* anything else   → ``str(value)``

``$${`` and ``$$`` escape a literal ``${`` and ``$``.

Built-in JMESPath functions
---------------------------
* ``lowercase(s)`` / ``uppercase(s)``
* ``concat(a, b)`` – string concatenation
"""

from __future__ import annotations

import json
import logging
from typing import Any, List, Mapping, Union

import jmespath
import regex
from jmespath import functions as _jp_funcs
from jmespath.exceptions import JMESPathError

from .core import TemplateRenderer
from .errors import TemplateError

logger = logging.getLogger(__name__)

# ─────────────────────────────────────────────────────────────────────────────
# Built-in JMESPath functions
# ─────────────────────────────────────────────────────────────────────────────


class _BuiltinJMESFunctions(_jp_funcs.Functions):
    """Custom JMESPath functions for template expressions."""

    @_jp_funcs.signature({"types": ["string"]})
    def _func_lowercase(self, s: str) -> str:
        return s.lower()

    @_jp_funcs.signature({"types": ["string"]})
    def _func_uppercase(self, s: str) -> str:
        return s.upper()

    @_jp_funcs.signature({"types": ["string"]}, {"types": ["string"]})
    def _func_concat(self, a: str, b: str) -> str:
        return a + b


_BUILTIN_JMES_OPTIONS = jmespath.Options(custom_functions=_BuiltinJMESFunctions())

# Scanned left to right; alternatives are tried in order at each offset.
_TOKEN_RE = regex.compile(r"(?P<escaped_open>\$\$\{)|(?P<escaped_dollar>\$\$)|(?P<open>\$\{)")

DEFAULT_TIMEOUT = 1.0


def has_placeholder(s: Any, timeout: float = DEFAULT_TIMEOUT) -> bool:
    """Return True if *s* is a string with at least one unescaped ``${``."""
    if not isinstance(s, str):
        return False
    return any(m.lastgroup == "open" for m in _TOKEN_RE.finditer(s, timeout=timeout))


def render_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (Mapping, list)):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


# ─────────────────────────────────────────────────────────────────────────────
# Template
# ─────────────────────────────────────────────────────────────────────────────


class Template(TemplateRenderer):
    """A compiled ``${…}`` template.

    The source is scanned and every expression compiled once, at
    construction; syntax errors surface there as ``TemplateError``.

    Configuration
    -------------
    jmes_options
        Custom ``jmespath.Options`` instance.  If ``None``, uses the built-in
        function set.

    timeout
        Seconds allowed for the placeholder scan.
    """

    def __init__(
            self,
            source: str,
            *,
            jmes_options: jmespath.Options | None = None,
            timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        if not isinstance(source, str):
            raise TemplateError(repr(source), "template source must be a string")
        self.source = source
        self._jp_options = jmes_options if jmes_options else _BUILTIN_JMES_OPTIONS
        self._timeout = timeout
        self._parts = self._compile(source)

    # -- public -------------------------------------------------------------

    def render(self, model: Mapping[str, Any]) -> str:
        out: List[str] = []
        for part in self._parts:
            if isinstance(part, str):
                out.append(part)
                continue
            try:
                value = part.search(model, options=self._jp_options)
            except JMESPathError as e:
                logger.debug("template %r failed on expression %r: %s", self.source, part.expression, e)
                raise TemplateError(self.source, str(e)) from e
            out.append(render_value(value))
        return "".join(out)

    def __repr__(self) -> str:
        return f"Template({self.source!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Template) and other.source == self.source

    def __hash__(self) -> int:
        return hash(self.source)

    # -- internal -----------------------------------------------------------

    def _compile(self, tmpl: str) -> List[Union[str, Any]]:
        """Split *tmpl* into literal strings and compiled expressions.

        Brace depth is tracked so expressions may contain JMESPath
        multi-select hashes (``${{a: b}}``).
        """
        parts: List[Union[str, Any]] = []
        literal: List[str] = []

        pos = 0
        while True:
            m = _TOKEN_RE.search(tmpl, pos, timeout=self._timeout)
            if m is None:
                literal.append(tmpl[pos:])
                break
            literal.append(tmpl[pos:m.start()])

            if m.lastgroup == "escaped_open":
                literal.append("${")
                pos = m.end()
                continue
            if m.lastgroup == "escaped_dollar":
                literal.append("$")
                pos = m.end()
                continue

            i = m.start()
            depth = 0
            j = m.end()
            while j < len(tmpl):
                ch = tmpl[j]
                if ch == "{":
                    depth += 1
                elif ch == "}":
                    if depth == 0:
                        break
                    depth -= 1
                j += 1
            else:
                raise TemplateError(tmpl, f"unclosed placeholder at offset {i}")

            expr = tmpl[m.end():j].strip()
            if not expr:
                raise TemplateError(tmpl, f"empty placeholder at offset {i}")
            try:
                compiled = jmespath.compile(expr)
            except JMESPathError as e:
                raise TemplateError(tmpl, str(e)) from e

            text = "".join(literal)
            if text:
                parts.append(text)
            literal = []
            parts.append(compiled)
            pos = j + 1

        text = "".join(literal)
        if text:
            parts.append(text)
        return parts


def compile_template(source: Union[str, TemplateRenderer], **kwargs: Any) -> TemplateRenderer:
    """Return *source* if it already renders, else compile it as a ``Template``."""
    if isinstance(source, TemplateRenderer):
        return source
    return Template(source, **kwargs)
