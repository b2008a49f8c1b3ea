# Copyright 2025 CrownOps Engineering
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Minimal interpolation templates for fingerprinted names.

A template interpolates expressions written as ``{{= name }}`` or
``{{= +name }}``. The first form looks ``name`` up in the variable set and
stringifies it; the second coerces the value to a number first, which turns a
modification time into an integer epoch in milliseconds::

    >>> render("{{= size}}-{{= +mtime}}", {"size": 12, "mtime": mtime})
    '12-1700000000000'

Unknown names and ``None`` render as an empty string. Delimiters belong to a
``TemplateRenderer`` instance, so two renderers with different delimiters never
interfere with each other.
"""

from __future__ import annotations

import math
import re
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Final

from filehash.compat import UTC
from filehash.exceptions import FilehashTypeError, FilehashValidationError, TemplateSyntaxError

if TYPE_CHECKING:
    from collections.abc import Mapping

__all__ = [
    "DEFAULT_DELIMITERS",
    "TemplateRenderer",
    "coerce_number",
    "render",
    "stringify",
]

DEFAULT_DELIMITERS: Final[tuple[str, str]] = ("{{", "}}")

_EXPRESSION: Final[re.Pattern[str]] = re.compile(r"(?P<plus>\+)?\s*(?P<name>[A-Za-z_$][\w$]*)")
_EPOCH: Final[datetime] = datetime(1970, 1, 1, tzinfo=UTC)
_MILLISECOND: Final[timedelta] = timedelta(milliseconds=1)


def coerce_number(value: object) -> int | float:
    """Apply unary-plus numeric coercion to a template value.

    Args:
        value: Raw variable value.

    Returns:
        Epoch milliseconds for datetimes, ``0``/``1`` for booleans, the number
        itself for ints and floats, the parsed number for numeric strings
        (``0`` for a blank one) and ``nan`` for anything else.
    """
    if isinstance(value, datetime):
        aware = value if value.tzinfo is not None else value.astimezone(UTC)
        return (aware - _EPOCH) // _MILLISECOND
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int | float):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def stringify(value: object) -> str:
    """Convert a template value to the text interpolated into the output."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


class TemplateRenderer:
    """Render interpolation templates with a fixed pair of delimiters."""

    __slots__ = ("_close", "_open", "_pattern")

    def __init__(
        self,
        open_delimiter: str = DEFAULT_DELIMITERS[0],
        close_delimiter: str = DEFAULT_DELIMITERS[1],
    ) -> None:
        """Build a renderer for ``<open>= expression <close>`` interpolations.

        Args:
            open_delimiter: Text opening an interpolation (the ``=`` follows it).
            close_delimiter: Text closing an interpolation.

        Raises:
            FilehashTypeError: If a delimiter is not a string.
            FilehashValidationError: If either delimiter is empty.
        """
        if not isinstance(open_delimiter, str) or not isinstance(close_delimiter, str):
            msg = "Template delimiters must be strings"
            raise FilehashTypeError(msg)
        if not open_delimiter or not close_delimiter:
            msg = "Template delimiters must be non-empty strings"
            raise FilehashValidationError(msg)
        self._open = open_delimiter
        self._close = close_delimiter
        self._pattern = re.compile(
            re.escape(open_delimiter) + r"=\s*(.*?)\s*" + re.escape(close_delimiter),
            re.DOTALL,
        )

    @property
    def delimiters(self) -> tuple[str, str]:
        return self._open, self._close

    def render(self, template: str, variables: Mapping[str, object]) -> str:
        """Interpolate every expression in `template` against `variables`.

        Args:
            template: Template text.
            variables: Variable set; missing names render as ``""``.

        Returns:
            The rendered string.

        Raises:
            FilehashTypeError: If `template` is not a string.
            TemplateSyntaxError: If an expression is not a (possibly ``+``
                prefixed) identifier.
        """
        if not isinstance(template, str):
            msg = f"Template must be a string, got {type(template).__name__}"
            raise FilehashTypeError(msg)

        def _substitute(match: re.Match[str]) -> str:
            plus, name = self._parse(template, match.group(1))
            value = variables.get(name)
            if plus:
                return stringify(coerce_number(value))
            return stringify(value)

        return self._pattern.sub(_substitute, template)

    def validate(self, template: str) -> None:
        """Raise ``TemplateSyntaxError`` if `template` has an invalid expression."""
        for match in self._pattern.finditer(template):
            _ = self._parse(template, match.group(1))

    def names(self, template: str) -> list[str]:
        """Return the variable names referenced by `template`, in order of appearance."""
        return [self._parse(template, match.group(1))[1] for match in self._pattern.finditer(template)]

    @staticmethod
    def _parse(template: str, expression: str) -> tuple[bool, str]:
        parsed = _EXPRESSION.fullmatch(expression)
        if parsed is None:
            raise TemplateSyntaxError(template, expression)
        return parsed.group("plus") is not None, parsed.group("name")

    def __repr__(self) -> str:
        return f"TemplateRenderer({self._open!r}, {self._close!r})"


_DEFAULT_RENDERER: Final[TemplateRenderer] = TemplateRenderer()


def render(template: str, variables: Mapping[str, object]) -> str:
    """Render `template` with the default ``{{= name }}`` delimiters."""
    return _DEFAULT_RENDERER.render(template, variables)
