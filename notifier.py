"""
Delivery hook for accepted contact submissions.

Nothing is sent anywhere: the default notifier only records the submission
in the diagnostic log. A real delivery channel plugs in by implementing
`Notifier` and overriding the `get_notifier` dependency.
"""

import logging
from typing import Protocol

from schemas import ContactSubmission

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, submission: ContactSubmission) -> None:
        ...


class LoggingNotifier:
    """Write the accepted submission to the log."""

    def notify(self, submission: ContactSubmission) -> None:
        logger.info("Contact submission received: %s", submission.model_dump())


_default_notifier = LoggingNotifier()


def get_notifier() -> Notifier:
    return _default_notifier
