import re
import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models


class TurnstileUser(AbstractUser):
    """A user of the platform.

    Event owners, delegated validators and ticket holders are all plain users;
    their role for a given admission is decided by the authorization policy.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    preferred_name = models.CharField(db_index=True, max_length=255, blank=True, help_text="Preferred name")

    class Meta:
        ordering = ["username"]

    @property
    def display_name(self) -> str:
        """Display name."""
        return self.get_display_name()

    def get_display_name(self) -> str:
        """Returns the user's preferred name, or their full name as a fallback."""
        return (
            self.preferred_name or self.get_full_name() or re.sub(r"(\W|_)+", " ", self.username.split("@")[0]).title()
        )
