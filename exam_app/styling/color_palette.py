"""Color palette for ExamQt supporting light and dark themes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class Theme(Enum):
    """Application theme options."""
    LIGHT = auto()
    DARK = auto()


@dataclass(frozen=True)
class ThemeColors:
    """Color definitions for a specific theme."""
    light: str
    dark: str

    def get(self, theme: Theme) -> str:
        """Get color value for the specified theme."""
        return self.light if theme == Theme.LIGHT else self.dark


class ColorPalette:
    """Centralized color definitions for the exam screens."""

    TEXT_PRIMARY = ThemeColors(light="#111827", dark="#F5F5F5")
    TEXT_SECONDARY = ThemeColors(light="#4B5563", dark="#AAAAAA")

    BACKGROUND_PRIMARY = ThemeColors(light="#FFFFFF", dark="#1E1E1E")
    BACKGROUND_SECONDARY = ThemeColors(light="#F3F4F6", dark="#2D2D2D")

    BORDER_PRIMARY = ThemeColors(light="#D1D5DB", dark="#555555")

    BUTTON_PRIMARY_BG = ThemeColors(light="#2563EB", dark="#4A9EFF")
    BUTTON_PRIMARY_TEXT = ThemeColors(light="#FFFFFF", dark="#000000")
    BUTTON_SECONDARY_BG = ThemeColors(light="#F3F4F6", dark="#3A3A3A")
    BUTTON_HOVER_BG = ThemeColors(light="#E5E7EB", dark="#505050")

    # Countdown levels
    TIMER_NORMAL = ThemeColors(light="#2563EB", dark="#4A9EFF")
    TIMER_WARNING = ThemeColors(light="#EA580C", dark="#FFA14A")
    TIMER_CRITICAL = ThemeColors(light="#DC2626", dark="#FF6B6B")

    # Status
    SUCCESS = ThemeColors(light="#15803D", dark="#6FCF6F")
    WARNING_BG = ThemeColors(light="#FFF7ED", dark="#3B2A17")
    ERROR = ThemeColors(light="#B91C1C", dark="#FF6B6B")
    ERROR_BG = ThemeColors(light="#FEF2F2", dark="#3A1F1F")
