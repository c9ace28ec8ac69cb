"""Centralized styles and font definitions for the application."""

from PySide6.QtWidgets import QApplication

from .color_palette import ColorPalette, Theme

_application_styles_applied = False


def apply_application_styles(app: QApplication, theme: Theme = Theme.LIGHT) -> bool:
    """Install the global stylesheet once per process.

    Returns False when the styles were already applied.
    """
    global _application_styles_applied
    if _application_styles_applied:
        return False
    app.setStyleSheet(Styles.get_main_window_style(theme))
    _application_styles_applied = True
    return True


def application_styles_applied() -> bool:
    return _application_styles_applied


class Styles:
    """Helper class to generate Qt stylesheets based on the current theme."""

    @staticmethod
    def get_main_window_style(theme: Theme = Theme.LIGHT) -> str:
        text = ColorPalette.TEXT_PRIMARY.get(theme)
        border = ColorPalette.BORDER_PRIMARY.get(theme)
        accent = ColorPalette.BUTTON_PRIMARY_BG.get(theme)
        return f"""
            QMainWindow, QScrollArea > QWidget > QWidget {{
                background-color: {ColorPalette.BACKGROUND_PRIMARY.get(theme)};
                color: {text};
            }}
            QWidget {{
                font-size: 14px;
            }}
            QPushButton {{
                background-color: {ColorPalette.BUTTON_SECONDARY_BG.get(theme)};
                color: {text};
                border: 1px solid {border};
                border-radius: 6px;
                padding: 8px 16px;
            }}
            QPushButton:hover {{
                background-color: {ColorPalette.BUTTON_HOVER_BG.get(theme)};
            }}
            QPushButton:disabled {{
                color: {ColorPalette.TEXT_SECONDARY.get(theme)};
            }}
            QPushButton[primary="true"] {{
                background-color: {accent};
                color: {ColorPalette.BUTTON_PRIMARY_TEXT.get(theme)};
                border-color: {accent};
                font-weight: 600;
            }}
            QLineEdit, QPlainTextEdit, QComboBox, QDateEdit {{
                border: 1px solid {border};
                border-radius: 6px;
                padding: 6px;
            }}
            QLineEdit:focus, QPlainTextEdit:focus {{
                border-color: {accent};
            }}
            QProgressBar {{
                border: none;
                background-color: {ColorPalette.BACKGROUND_SECONDARY.get(theme)};
                max-height: 6px;
            }}
            QProgressBar::chunk {{
                background-color: {accent};
            }}
            QGroupBox {{
                border: 1px solid {border};
                border-radius: 8px;
                margin-top: 4px;
                padding: 8px;
            }}
        """

    @staticmethod
    def get_large_label_style() -> str:
        return "font-size: 16pt; font-weight: bold;"

    @staticmethod
    def get_timer_style(level: str, theme: Theme = Theme.LIGHT) -> str:
        colors = {
            "normal": ColorPalette.TIMER_NORMAL,
            "warning": ColorPalette.TIMER_WARNING,
            "critical": ColorPalette.TIMER_CRITICAL,
        }
        color = colors.get(level, ColorPalette.TIMER_NORMAL).get(theme)
        weight = "bold" if level != "normal" else "600"
        return f"font-size: 20pt; font-family: monospace; font-weight: {weight}; color: {color};"

    @staticmethod
    def get_field_error_style(theme: Theme = Theme.LIGHT) -> str:
        return f"color: {ColorPalette.ERROR.get(theme)}; font-size: 9pt;"

    @staticmethod
    def get_banner_style(kind: str, theme: Theme = Theme.LIGHT) -> str:
        if kind == "error":
            text, background = ColorPalette.ERROR, ColorPalette.ERROR_BG
        else:
            text, background = ColorPalette.TIMER_WARNING, ColorPalette.WARNING_BG
        return (
            f"color: {text.get(theme)}; background-color: {background.get(theme)}; "
            f"border: 1px solid {text.get(theme)}; border-radius: 6px; padding: 8px;"
        )

    @staticmethod
    def get_result_style(correct: bool, theme: Theme = Theme.LIGHT) -> str:
        color = ColorPalette.SUCCESS if correct else ColorPalette.ERROR
        return f"color: {color.get(theme)}; font-weight: bold;"
