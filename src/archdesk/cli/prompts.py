"""Interactive yes/no prompts for the CLI layer.

This module is responsible for:

* Asking the user to confirm destructive steps via questionary.
* Answering automatically when ``--yes`` was given.
* Translating a cancelled prompt (Ctrl+C / Esc) into
  ``KeyboardInterrupt`` so the error boundary exits with 130.
"""

from __future__ import annotations

from typing import Any

from archdesk.exceptions import EnvironmentError


def _import_questionary() -> Any:
    """Import questionary lazily for interactive confirmation."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


class QuestionaryConfirmer:
    """Concrete :class:`~archdesk.core.protocols.Confirmer`.

    Parameters
    ----------
    assume_yes:
        Answer every question with yes without prompting.
    """

    def __init__(self, *, assume_yes: bool = False) -> None:
        self._assume_yes = assume_yes

    def confirm(self, question: str, *, default: bool = False) -> bool:
        """Ask *question*; the default answer is No unless stated.

        Raises
        ------
        KeyboardInterrupt
            If the user cancels the prompt.
        EnvironmentError
            If questionary is not installed.
        """
        if self._assume_yes:
            return True

        questionary = _import_questionary()
        answer: bool | None = questionary.confirm(question, default=default).ask()
        if answer is None:  # Returned on Ctrl+C / Esc
            raise KeyboardInterrupt
        return answer
