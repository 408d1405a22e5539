"""Progress bar widget."""

from rich.text import Text

from studytrack.tui.theme import Theme

FILLED = "█"
EMPTY = "░"

LOW_THRESHOLD = 0.33
MEDIUM_THRESHOLD = 0.66


def _clamp(progress: float) -> float:
    if progress < 0.0:
        return 0.0
    if progress > 1.0:
        return 1.0
    return progress


def render_bar(progress: float, width: int) -> str:
    """Plain glyph bar, no brackets or color."""
    progress = _clamp(progress)
    width = max(0, width)
    filled = min(width, int(progress * width))
    return FILLED * filled + EMPTY * (width - filled)


def band_color(progress: float) -> str:
    """Red below a third, yellow below two thirds, green otherwise."""
    if progress < LOW_THRESHOLD:
        return Theme.PROGRESS_LOW
    if progress < MEDIUM_THRESHOLD:
        return Theme.PROGRESS_MED
    return Theme.PROGRESS_HIGH


class ProgressBar:
    """Color-coded bar for a 0.0-1.0 progress value."""

    def __init__(self, progress: float, width: int = 40):
        self.progress = _clamp(progress)
        self.width = width

    def render(self) -> Text:
        """'[████░░░░] 50%' with the bar in its band color."""
        text = Text("[")
        text.append(render_bar(self.progress, self.width), style=band_color(self.progress))
        text.append(f"] {int(self.progress * 100)}%")
        return text

    def __str__(self) -> str:
        return self.render().plain
