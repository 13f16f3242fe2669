"""Overlap-free label placement for building annotations.

Labels are placed next to an anchor point in a planar frame (meters in
the local frame, or pixels for a rendered map). Already occupied space is
carried in an immutable LabelLayout that each call takes and returns, so
a sequence of placements is reproducible.
"""

from dataclasses import dataclass

# Fallback distances as multiples of the standard anchor distance
FALLBACK_DISTANCE_FACTORS = (1.5, 2.0, 2.5)


@dataclass(frozen=True)
class LabelRect:
    """Axis-aligned rectangle with its lower-left corner at (x, y)."""

    x: float
    y: float
    width: float
    height: float

    def overlaps(self, other: "LabelRect") -> bool:
        """Rectangles overlap, touching edges included."""
        return not (
            self.x + self.width < other.x
            or other.x + other.width < self.x
            or self.y + self.height < other.y
            or other.y + other.height < self.y
        )


@dataclass(frozen=True)
class LabelLayout:
    """Space already taken by placed labels and their markers."""

    occupied: tuple[LabelRect, ...] = ()

    def is_free(self, rect: LabelRect) -> bool:
        return not any(rect.overlaps(used) for used in self.occupied)

    def with_rects(self, *rects: LabelRect) -> "LabelLayout":
        return LabelLayout(occupied=self.occupied + tuple(rects))


@dataclass(frozen=True)
class LabelStyle:
    """Label and marker dimensions in frame units."""

    width: float = 24.0
    height: float = 8.0
    marker_size: float = 4.0
    min_distance: float = 6.0
    padding: float = 2.0


def _candidate_offsets(style: LabelStyle) -> list[tuple[float, float]]:
    """Lower-left corner offsets from the anchor, in preference order."""
    d = style.min_distance
    w = style.width
    h = style.height
    return [
        (d, -h / 2),        # Right center
        (d, d),             # Top right
        (-w - d, -h / 2),   # Left center
        (-w - d, -h - d),   # Bottom left
        (d, -h - d),        # Bottom right
        (-w / 2, d),        # Top center
        (-w / 2, -h - d),   # Bottom center
        (-w - d, d),        # Top left
    ]


def _within_bounds(
    rect: LabelRect,
    bounds: tuple[float, float, float, float] | None,
    padding: float,
) -> bool:
    if bounds is None:
        return True
    min_x, min_y, max_x, max_y = bounds
    return (
        rect.x >= min_x + padding
        and rect.x + rect.width <= max_x - padding
        and rect.y >= min_y + padding
        and rect.y + rect.height <= max_y - padding
    )


def find_label_position(
    anchor: tuple[float, float],
    layout: LabelLayout,
    style: LabelStyle | None = None,
    bounds: tuple[float, float, float, float] | None = None,
) -> tuple[tuple[float, float], LabelLayout]:
    """Find a spot for a label next to an anchor point.

    Tries eight positions around the anchor, then the same directions at
    1.5, 2 and 2.5 times the distance, keeping the first that stays inside
    the padded bounds and overlaps no occupied space. If none fits, the
    label is clamped into the bounds at the top-right position.

    Args:
        anchor: (x, y) point being labelled
        layout: Space already occupied
        style: Label dimensions
        bounds: Optional (min_x, min_y, max_x, max_y) the label must stay in

    Returns:
        Tuple of (lower-left corner of the label, updated layout)
    """
    style = style or LabelStyle()
    ax, ay = anchor
    marker = LabelRect(
        ax - style.marker_size / 2,
        ay - style.marker_size / 2,
        style.marker_size,
        style.marker_size,
    )

    offsets = _candidate_offsets(style)
    for factor in (1.0,) + FALLBACK_DISTANCE_FACTORS:
        for dx, dy in offsets:
            rect = LabelRect(ax + dx * factor, ay + dy * factor, style.width, style.height)
            if not _within_bounds(rect, bounds, style.padding):
                continue
            if layout.is_free(rect):
                return (rect.x, rect.y), layout.with_rects(rect, marker)

    x = ax + style.min_distance
    y = ay + style.min_distance
    if bounds is not None:
        min_x, min_y, max_x, max_y = bounds
        x = max(min_x + style.padding, min(max_x - style.width - style.padding, x))
        y = max(min_y + style.padding, min(max_y - style.height - style.padding, y))

    rect = LabelRect(x, y, style.width, style.height)
    return (x, y), layout.with_rects(rect, marker)
