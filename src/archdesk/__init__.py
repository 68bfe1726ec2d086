"""archdesk: desktop maintenance tasks for Arch Linux workstations.

Switches the audio stack, blacklists ALSA modules, resets audio daemon
state, installs a GTK theme and a font, and changes the system locale.
"""

from archdesk.version import __version__

__all__: list[str] = ["__version__"]
