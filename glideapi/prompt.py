"""Interactive template selection."""

from __future__ import annotations

from typing import Sequence

from rich.prompt import Prompt

from .errors import ConfigurationMissing, UserCancelled
from .naming import to_title_case
from .utils import console


def choose_template(choices: Sequence[str], default: str | None = None) -> str:
    """Ask the user to pick one template key.

    Choices are shown in Title Case; the selected registry key is returned.

    Raises:
        ConfigurationMissing: If there is nothing to choose from.
        UserCancelled: If the prompt is aborted with Ctrl-C or EOF.
    """
    if not choices:
        raise ConfigurationMissing("No project templates are available")
    labels = {to_title_case(choice): choice for choice in choices}
    default_label = to_title_case(default or choices[0])
    try:
        label = Prompt.ask(
            "Select a template",
            choices=list(labels),
            default=default_label,
            console=console,
        )
    except (KeyboardInterrupt, EOFError):
        raise UserCancelled() from None
    return labels[label]
