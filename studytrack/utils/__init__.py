"""Utility functions for StudyTrack."""

from .helpers import load_config, get_settings
from .logger import get_logger, setup_logging

__all__ = ['load_config', 'get_settings', 'get_logger', 'setup_logging']
