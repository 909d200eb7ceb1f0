"""
Element value resolution.

Determines the content of a text, barcode or QR element for one data row:

1. a binding containing ``{{`` is evaluated as a template
2. the column the mapping assigns to the element id, when the row has it
3. the binding used directly as a column name, when the row has it
4. the element's literal ``text_content``

An empty result means "no value": the element is skipped downstream and
nothing is substituted for it.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from .expressions import evaluate, is_expression, lookup_column
from .models import BoundElement, EvaluationContext

logger = logging.getLogger(__name__)


def resolve_value(
    element: BoundElement,
    row: Optional[Mapping[str, Any]],
    mapping: Optional[Mapping[str, str]],
    context: EvaluationContext,
) -> Optional[str]:
    """Resolve the element's content for ``row``; None when there is none."""
    row = row or {}
    binding = element.binding

    if is_expression(binding):
        value = evaluate(binding, row, context)
        return value or None

    column = (mapping or {}).get(element.id)
    if column:
        value = lookup_column(column, row)
        if value:
            return value

    if binding:
        value = lookup_column(binding, row)
        if value:
            return value

    if element.text_content:
        return element.text_content

    logger.debug("No value for element %s", element.id)
    return None
