"""UI Theme Constants for SitePass.

Centralises all colour, font, and sizing constants for the CustomTkinter
interface.  Colours that differ between light and dark appearance are
``(light, dark)`` tuples, which CustomTkinter resolves against the active
appearance mode.

This file contains **zero logic**; only ``Final`` constants.
"""

from __future__ import annotations

from typing import Final

ThemeColor = tuple[str, str]

# ---------------------------------------------------------------------------
# Brand
# ---------------------------------------------------------------------------

APP_NAME: Final[str] = "ContractorECR"
APP_TAGLINE: Final[str] = "Welcome to Site Pass"

# ---------------------------------------------------------------------------
# Colour palette: dark navigation bar + light/dark content
# ---------------------------------------------------------------------------

NAV_BG: Final[str] = "#0f172a"
NAV_HOVER: Final[str] = "#1e293b"
NAV_ACTIVE: Final[str] = "#334155"
NAV_TEXT: Final[str] = "#e2e8f0"

CONTENT_BG: Final[ThemeColor] = ("#f1f5f9", "#020617")
CARD_BG: Final[ThemeColor] = ("#ffffff", "#0f172a")
CARD_BORDER: Final[ThemeColor] = ("#e2e8f0", "#1e293b")
TABLE_HEADER_BG: Final[ThemeColor] = ("#f8fafc", "#1e293b")
TABLE_ROW_ALT_BG: Final[ThemeColor] = ("#f8fafc", "#111827")

ACCENT_PRIMARY: Final[str] = "#0f172a"
ACCENT_HOVER: Final[str] = "#1e293b"
TEXT_PRIMARY: Final[ThemeColor] = ("#0f172a", "#f8fafc")
TEXT_SECONDARY: Final[ThemeColor] = ("#64748b", "#94a3b8")
TEXT_LIGHT: Final[str] = "#ffffff"

# Section header tones (screen display)
HEADER_SLATE: Final[str] = "#0f172a"
HEADER_BLUE: Final[str] = "#0b3a5a"
HEADER_GREEN: Final[str] = "#047857"

# Status indicators
STATUS_ONLINE: Final[str] = "#16a34a"
STATUS_OFFLINE: Final[str] = "#dc2626"
STATUS_CONNECTING: Final[str] = "#f59e0b"

# Actions
CONFIRM_GREEN: Final[str] = "#16a34a"
CONFIRM_GREEN_HOVER: Final[str] = "#15803d"
LOGIN_BLUE: Final[str] = "#0b3a5a"
LOGIN_BLUE_HOVER: Final[str] = "#0a2f49"
DISABLED_BG: Final[ThemeColor] = ("#e2e8f0", "#334155")
DISABLED_TEXT: Final[ThemeColor] = ("#64748b", "#94a3b8")
DELETE_RED: Final[str] = "#dc2626"
DELETE_RED_HOVER: Final[str] = "#b91c1c"

# Row highlight for a pending sign-out request
SIGNOUT_REQUESTED_BG: Final[ThemeColor] = ("#fef3c7", "#78350f")
SCREEN_AWAITING_BG: Final[ThemeColor] = ("#ecfdf5", "#064e3b")
SCREEN_SIGNOUT_BG: Final[ThemeColor] = ("#fff1f2", "#4c0519")

# Input / form
INPUT_BORDER: Final[ThemeColor] = ("#cbd5e1", "#334155")
ERROR_TEXT: Final[str] = "#dc2626"
SUCCESS_TEXT: Final[str] = "#15803d"
WARNING_TEXT: Final[str] = "#b45309"

# ---------------------------------------------------------------------------
# Fonts (Segoe UI: Windows default, fallback to system)
# ---------------------------------------------------------------------------

FONT_FAMILY: Final[str] = "Segoe UI"
FONT_BRAND: Final[tuple[str, int, str]] = (FONT_FAMILY, 20, "bold")
FONT_HERO: Final[tuple[str, int, str]] = (FONT_FAMILY, 32, "bold")
FONT_HEADING: Final[tuple[str, int, str]] = (FONT_FAMILY, 22, "bold")
FONT_SECTION: Final[tuple[str, int, str]] = (FONT_FAMILY, 15, "bold")
FONT_SUBTITLE: Final[tuple[str, int]] = (FONT_FAMILY, 13)
FONT_BODY: Final[tuple[str, int]] = (FONT_FAMILY, 13)
FONT_NAV: Final[tuple[str, int]] = (FONT_FAMILY, 13)
FONT_NAV_ACTIVE: Final[tuple[str, int, str]] = (FONT_FAMILY, 13, "bold")
FONT_LABEL: Final[tuple[str, int, str]] = (FONT_FAMILY, 11, "bold")
FONT_SMALL: Final[tuple[str, int]] = (FONT_FAMILY, 11)
FONT_BUTTON: Final[tuple[str, int, str]] = (FONT_FAMILY, 13, "bold")
FONT_KIOSK_BUTTON: Final[tuple[str, int, str]] = (FONT_FAMILY, 20, "bold")
FONT_TILE_VALUE: Final[tuple[str, int, str]] = (FONT_FAMILY, 30, "bold")
FONT_TILE_LABEL: Final[tuple[str, int, str]] = (FONT_FAMILY, 12, "bold")
FONT_SCREEN_ROW: Final[tuple[str, int]] = (FONT_FAMILY, 16)

# ---------------------------------------------------------------------------
# Dimensions
# ---------------------------------------------------------------------------

NAV_HEIGHT: Final[int] = 52
STATUS_BAR_HEIGHT: Final[int] = 28
MAIN_WINDOW_WIDTH: Final[int] = 1280
MAIN_WINDOW_HEIGHT: Final[int] = 800
MIN_WINDOW_WIDTH: Final[int] = 900
MIN_WINDOW_HEIGHT: Final[int] = 600
FORM_WIDTH: Final[int] = 560
CORNER_RADIUS: Final[int] = 8
PADDING_SM: Final[int] = 8
PADDING_MD: Final[int] = 16
PADDING_LG: Final[int] = 24
