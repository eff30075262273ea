import typing as t

from ninja_extra import ControllerBase

from accounts.models import TurnstileUser


class UserAwareController(ControllerBase):
    def user(self) -> TurnstileUser:
        """Get the user for this request."""
        return t.cast(TurnstileUser, self.context.request.user)  # type: ignore[union-attr]
