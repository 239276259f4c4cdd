"""SVG badges and latency sparklines."""
import math
from typing import List, Sequence

from ..schemas.outcome import CheckOutcome, CheckStatus
from .templating import get_environment

# status -> (light color, dark color)
BADGE_COLORS = {
    "up": ("#0a0", "#0f0"),
    "maintenance": ("#fa0", "#fc6"),
    "down": ("#d00", "#f44"),
}

SPARKLINE_POINTS = 50


def render_badge(label: str, status: str, message: str = "") -> str:
    """Shields-style badge for {name, status}; unknown statuses render red."""
    message = message or status
    color, dark_color = BADGE_COLORS.get(status, BADGE_COLORS["down"])
    label_width = len(label) * 6 + 10
    message_width = len(message) * 6 + 10
    return get_environment().get_template("badge.svg").render(
        label=label,
        message=message,
        color=color,
        dark_color=dark_color,
        label_width=label_width,
        message_width=message_width,
        total_width=label_width + message_width,
    )


def _smooth_path(points: List[tuple]) -> str:
    """Cubic Bezier path through the points (Catmull-Rom control points)."""
    path = [f"M{points[0][0]:.1f},{points[0][1]:.1f}"]
    for i in range(len(points) - 1):
        p0 = points[max(i - 1, 0)]
        p1 = points[i]
        p2 = points[i + 1]
        p3 = points[min(i + 2, len(points) - 1)]
        cp1 = (p1[0] + (p2[0] - p0[0]) / 6, p1[1] + (p2[1] - p0[1]) / 6)
        cp2 = (p2[0] - (p3[0] - p1[0]) / 6, p2[1] - (p3[1] - p1[1]) / 6)
        path.append(
            f"C{cp1[0]:.1f},{cp1[1]:.1f} {cp2[0]:.1f},{cp2[1]:.1f} {p2[0]:.1f},{p2[1]:.1f}"
        )
    return " ".join(path)


def render_sparkline(series: Sequence[CheckOutcome], width: int = 900, height: int = 200) -> str:
    """Latency chart of the last 50 up checks; empty when there are fewer than 2."""
    data = [o.response_time_ms for o in series if o.status == CheckStatus.UP][-SPARKLINE_POINTS:]
    if len(data) < 2:
        return ""

    max_rounded = max(100, int(math.ceil(max(data) / 100.0)) * 100)
    left, right, top, bottom = 50, 20, 20, 30
    chart_width = width - left - right
    chart_height = height - top - bottom
    step = chart_width / (len(data) - 1)

    def y_for(value: float) -> float:
        return top + chart_height - (value / max_rounded) * chart_height

    points = [(left + i * step, y_for(value), value) for i, value in enumerate(data)]
    ticks = [(tick, y_for(tick)) for tick in range(0, max_rounded + 1, 100)]

    return get_environment().get_template("sparkline.svg").render(
        width=width,
        height=height,
        left=left,
        right=right,
        top=top,
        bottom=bottom,
        path=_smooth_path([(x, y) for x, y, _ in points]),
        points=points,
        ticks=ticks,
    )
