"""pi-viewport: virtual-scrolling viewport engine for terminal chat transcripts."""

# Item contract
from pi.viewport.item import (
    END_OF_LINE,
    NO_HIGHLIGHT,
    Capability,
    Focusable,
    Highlightable,
    Item,
    MouseClickable,
    capabilities_of,
    item_id_of,
)

# Stock items
from pi.viewport.items import ComponentItem, LinesItem, SpacerItem, TextItem, ToggleItem

# Layout strategies
from pi.viewport.compositor import BufferCompositor
from pi.viewport.dirty import DirtyTracker
from pi.viewport.layout import LayoutStrategy, create_layout
from pi.viewport.lazy import LazyLayout
from pi.viewport.positions import PositionEntry, PositionIndex

# Highlighting and mouse input
from pi.viewport.highlight import (
    ContentPoint,
    HighlightController,
    HighlightRange,
    MousePhase,
    apply_highlight,
    extract_text,
)
from pi.viewport.mouse import MouseAction, MouseButton, MouseEvent, parse_mouse_event

# Configuration
from pi.viewport.options import ViewportOptions

# Surfaces
from pi.viewport.surface import Region, Surface

# Utilities
from pi.viewport.utils import (
    strip_ansi,
    visible_width,
    wrap_text_with_ansi,
)

# Viewport
from pi.viewport.viewport import Viewport

__all__ = [
    # Item contract
    "END_OF_LINE",
    "NO_HIGHLIGHT",
    "Capability",
    "Focusable",
    "Highlightable",
    "Item",
    "MouseClickable",
    "capabilities_of",
    "item_id_of",
    # Stock items
    "ComponentItem",
    "LinesItem",
    "SpacerItem",
    "TextItem",
    "ToggleItem",
    # Layout strategies
    "BufferCompositor",
    "DirtyTracker",
    "LayoutStrategy",
    "LazyLayout",
    "PositionEntry",
    "PositionIndex",
    "create_layout",
    # Highlighting and mouse input
    "ContentPoint",
    "HighlightController",
    "HighlightRange",
    "MouseAction",
    "MouseButton",
    "MouseEvent",
    "MousePhase",
    "apply_highlight",
    "extract_text",
    "parse_mouse_event",
    # Configuration
    "ViewportOptions",
    # Surfaces
    "Region",
    "Surface",
    # Utilities
    "strip_ansi",
    "visible_width",
    "wrap_text_with_ansi",
    # Viewport
    "Viewport",
]
