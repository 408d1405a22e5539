"""Colors shared by every StudyTrack view."""


class Theme:
    """Color theme inspired by htop/gtop."""
    # Status colors
    ACTIVE = "bright_green"
    WARNING = "bright_yellow"
    ERROR = "bright_red"
    INFO = "bright_cyan"
    DIM = "dim white"

    # Progress bands
    PROGRESS_LOW = "bright_red"
    PROGRESS_MED = "bright_yellow"
    PROGRESS_HIGH = "bright_green"

    # UI elements
    TITLE = "bold bright_magenta"
    HEADER = "bold bright_cyan"
    BORDER = "cyan"
    SELECTED = "reverse"
    HIGHLIGHT = "bold bright_magenta"
    NAV_ACTIVE = "bold black on bright_cyan"
    KEY = "bold black on bright_cyan"

    STATUS_COLORS = {
        'not-started': DIM,
        'in-progress': WARNING,
        'completed': ACTIVE,
        'skipped': DIM,
        'archived': DIM,
    }

    @classmethod
    def status_color(cls, status) -> str:
        return cls.STATUS_COLORS.get(str(status), "white")
