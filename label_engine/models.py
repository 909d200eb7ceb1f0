"""
Label Design Data Model

Immutable snapshots of a label design and the per-row evaluation context.

- ``Design``: physical size in millimetres and an ordered set of elements
- Elements: one frozen dataclass per kind (text, barcode, qr, line,
  rectangle, circle, image) sharing the geometry fields of ``BaseElement``
- ``EvaluationContext``: row position, batch size and the reference clock

Designs are plain JSON objects with snake_case keys; ``design_from_dict``
and ``element_from_dict`` turn them into these types.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, Union

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]
ColumnMapping = Mapping[str, str]


class DesignError(ValueError):
    """Raised when design data cannot be turned into a valid Design."""


@dataclass(frozen=True)
class BaseElement:
    """Geometry and stacking shared by every element kind (mm, degrees)."""
    id: str
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    rotation: float = 0.0
    z_index: int = 0
    visible: bool = True
    locked: bool = False
    name: str = ""

    kind = "element"


@dataclass(frozen=True)
class BoundElement(BaseElement):
    """Element whose content can come from a data row."""
    binding: Optional[str] = None
    text_content: Optional[str] = None


@dataclass(frozen=True)
class TextElement(BoundElement):
    font_size: float = 10.0
    font_family: str = "Arial"
    font_weight: str = "normal"
    text_align: str = "left"
    text_auto_fit: bool = False
    text_min_font_size: Optional[float] = None
    color: str = "#000000"

    kind = "text"


@dataclass(frozen=True)
class BarcodeElement(BoundElement):
    barcode_format: str = "CODE128"
    barcode_show_text: bool = False
    color: str = "#000000"
    background_color: Optional[str] = None

    kind = "barcode"


@dataclass(frozen=True)
class QrElement(BoundElement):
    qr_error_level: str = "M"
    color: str = "#000000"
    background_color: Optional[str] = None

    kind = "qr"


@dataclass(frozen=True)
class ShapeElement(BaseElement):
    color: str = "#000000"
    background_color: Optional[str] = None
    border_width: Optional[float] = None
    border_color: str = "#000000"
    border_radius: float = 0.0


@dataclass(frozen=True)
class LineElement(ShapeElement):
    kind = "line"


@dataclass(frozen=True)
class RectangleElement(ShapeElement):
    kind = "rectangle"


@dataclass(frozen=True)
class CircleElement(ShapeElement):
    border_radius: float = 100.0

    kind = "circle"


@dataclass(frozen=True)
class ImageElement(BaseElement):
    image_data: Optional[str] = None
    image_url: Optional[str] = None

    kind = "image"


Element = Union[
    TextElement,
    BarcodeElement,
    QrElement,
    LineElement,
    RectangleElement,
    CircleElement,
    ImageElement,
]

ELEMENT_TYPES: Dict[str, Type[BaseElement]] = {
    cls.kind: cls
    for cls in (
        TextElement,
        BarcodeElement,
        QrElement,
        LineElement,
        RectangleElement,
        CircleElement,
        ImageElement,
    )
}

# camelCase keys written by older canvas exports
KEY_ALIASES = {
    "zIndex": "z_index",
    "textContent": "text_content",
    "fontSize": "font_size",
    "barcodeFormat": "barcode_format",
    "qrErrorLevel": "qr_error_level",
}

FLOAT_FIELDS = {
    "x", "y", "width", "height", "rotation", "font_size",
    "text_min_font_size", "border_width", "border_radius",
}


@dataclass(frozen=True)
class Design:
    """
    A label template.

    Attributes:
        width_mm: Label width in millimetres (> 0)
        height_mm: Label height in millimetres (> 0)
        elements: Elements in stored order
        compliance_standard: Regulatory profile ("gs1", "fmd", "eu1169") or None
    """
    width_mm: float
    height_mm: float
    elements: Tuple[Element, ...] = ()
    name: str = ""
    background_color: str = "#FFFFFF"
    border_width: float = 0.0
    border_color: str = "#000000"
    border_radius: float = 0.0
    label_type: str = "single"
    compliance_standard: Optional[str] = None

    def __post_init__(self):
        if not self.width_mm or not self.height_mm or self.width_mm <= 0 or self.height_mm <= 0:
            raise DesignError(
                f"Label size must be positive, got {self.width_mm}x{self.height_mm} mm"
            )
        ids = [e.id for e in self.elements]
        if len(ids) != len(set(ids)):
            raise DesignError("Element ids must be unique within a design")

    def get_element(self, element_id: str) -> Optional[Element]:
        for element in self.elements:
            if element.id == element_id:
                return element
        return None


@dataclass(frozen=True)
class EvaluationContext:
    """
    Per-row evaluation inputs.

    ``now`` is always supplied by the caller so that generation is
    reproducible.
    """
    now: datetime
    row_index: int = 0
    batch_size: int = 1

    def __post_init__(self):
        if self.row_index < 0:
            raise ValueError(f"row_index must be >= 0, got {self.row_index}")
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")


def _coerce(name: str, value: Any) -> Any:
    if value is None:
        return None
    if name in FLOAT_FIELDS:
        return float(value)
    if name == "z_index":
        return int(value)
    return value


def element_from_dict(data: Mapping[str, Any], index: int = 0) -> Element:
    """
    Build an element from its stored mapping.

    Raises:
        DesignError: if the element type is missing or unknown, or a
            numeric field holds a non-numeric value
    """
    kind = data.get("type")
    cls = ELEMENT_TYPES.get(kind)
    if cls is None:
        raise DesignError(f"Unknown element type: {kind!r}")

    normalized = {KEY_ALIASES.get(k, k): v for k, v in data.items()}
    known = {f.name for f in fields(cls)}
    kwargs: Dict[str, Any] = {}

    for key, value in normalized.items():
        if key not in known or value is None:
            continue
        try:
            kwargs[key] = _coerce(key, value)
        except (TypeError, ValueError) as e:
            raise DesignError(f"Element field {key!r} is not numeric: {value!r}") from e

    kwargs["id"] = str(kwargs.get("id") or f"el_{index}")
    return cls(**kwargs)


def design_from_dict(data: Mapping[str, Any]) -> Design:
    """
    Build a Design from its stored mapping.

    Elements of unknown kind are dropped with a warning so that one
    unsupported element does not reject the whole design.
    """
    elements: List[Element] = []
    for index, raw in enumerate(data.get("elements") or []):
        try:
            elements.append(element_from_dict(raw, index))
        except DesignError as e:
            logger.warning("Dropping element %s: %s", raw.get("id", index), e)

    try:
        width = float(data.get("width_mm") or 0)
        height = float(data.get("height_mm") or 0)
    except (TypeError, ValueError) as e:
        raise DesignError("Label size must be numeric") from e

    return Design(
        width_mm=width,
        height_mm=height,
        elements=tuple(elements),
        name=data.get("name") or "",
        background_color=data.get("background_color") or "#FFFFFF",
        border_width=float(data.get("border_width") or 0.0),
        border_color=data.get("border_color") or "#000000",
        border_radius=float(data.get("border_radius") or 0.0),
        label_type=data.get("label_type") or "single",
        compliance_standard=data.get("compliance_standard"),
    )
