"""StudyTrack - learning plans, study sessions and progress statistics."""

__version__ = "0.1.0"
