"""GTK settings files written by the theme installer.

Pure text renderers plus the table of per-user settings files that get
backed up and restored.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

CURSOR_THEME = "Adwaita"
FONT_NAME = "Inter 10"
ICON_THEME = "Papirus-Dark"


@dataclass(frozen=True, slots=True)
class GtkSettingsFile:
    """A user GTK settings file and its name inside a backup directory."""

    path: Path
    backup_name: str


def settings_files(home: Path) -> tuple[GtkSettingsFile, ...]:
    """The GTK 3, GTK 4 and GTK 2 settings files for *home*."""
    return (
        GtkSettingsFile(home / ".config" / "gtk-3.0" / "settings.ini", "gtk-3.0-settings.ini"),
        GtkSettingsFile(home / ".config" / "gtk-4.0" / "settings.ini", "gtk-4.0-settings.ini"),
        GtkSettingsFile(home / ".gtkrc-2.0", "gtkrc-2.0"),
    )


def render_gtk3(theme: str) -> str:
    return (
        "[Settings]\n"
        f"gtk-theme-name={theme}\n"
        "gtk-application-prefer-dark-theme=true\n"
        f"gtk-cursor-theme-name={CURSOR_THEME}\n"
        f"gtk-font-name={FONT_NAME}\n"
        f"gtk-icon-theme-name={ICON_THEME}\n"
    )


def render_gtk4(theme: str) -> str:
    return (
        "[Settings]\n"
        f"gtk-theme-name={theme}\n"
        "gtk-application-prefer-dark-theme=true\n"
    )


def render_gtkrc2(theme: str) -> str:
    return f'gtk-theme-name="{theme}"\ngtk-font-name="{FONT_NAME}"\n'


def render_all(home: Path, theme: str) -> list[tuple[Path, str]]:
    """Pair every settings file with its new contents."""
    gtk3, gtk4, gtk2 = settings_files(home)
    return [
        (gtk3.path, render_gtk3(theme)),
        (gtk4.path, render_gtk4(theme)),
        (gtk2.path, render_gtkrc2(theme)),
    ]
