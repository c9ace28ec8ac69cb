"""Styling module for ExamQt application."""

from .color_palette import ColorPalette, Theme
from .styles import Styles, apply_application_styles

__all__ = ["ColorPalette", "Styles", "Theme", "apply_application_styles"]
