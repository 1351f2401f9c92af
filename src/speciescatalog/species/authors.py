"""Display-name lookup for species authors."""

import logging
import uuid

from speciescatalog.notifications.toasts import Notifier, Severity
from speciescatalog.profiles.repository import ProfileRepository
from speciescatalog.utils.result import Err

logger = logging.getLogger(__name__)


class AuthorResolver:
    """Resolves an author id to display names, reporting failures as toasts.

    ``resolve`` never raises: a failed lookup notifies the user and yields an
    empty list.
    """

    def __init__(self, profiles: ProfileRepository, notifier: Notifier) -> None:
        self.profiles = profiles
        self.notifier = notifier

    async def resolve(self, author_id: uuid.UUID) -> list[str]:
        try:
            result = await self.profiles.select_display_names(author_id)
        except Exception as e:
            logger.exception("Unexpected error resolving author %s", author_id)
            self.notifier.notify("Something went wrong.", str(e), Severity.DESTRUCTIVE)
            return []

        if isinstance(result, Err):
            self.notifier.notify("Something went wrong.", result.message, Severity.DESTRUCTIVE)
            return []
        return result.value
