from django.http import HttpRequest
from ninja_extra import ControllerBase
from ninja_extra.permissions import BasePermission

from events import models

# Actions a delegated validator may perform besides validating tickets.
DELEGATE_ACTIONS = frozenset({"view_admission_stats"})


class RootPermission(BasePermission):
    def __init__(self, action: str) -> None:
        """Store the action."""
        self.action = action

    def has_permission(self, request: HttpRequest, controller: ControllerBase) -> bool:
        """Must implement abstract method. This is due to an error in Ninja Extra.

        This Method will be ignored, only has_object_permission will be called.
        """
        return True


class EventPermission(RootPermission):
    def has_object_permission(
        self,
        request: HttpRequest,
        controller: ControllerBase,
        obj: models.Event,
    ) -> bool:
        """Owners may do anything; delegated validators only what DELEGATE_ACTIONS lists."""
        if obj.owner_id == request.user.id:
            return True
        if self.action not in DELEGATE_ACTIONS or not request.user.email:  # type: ignore[union-attr]
            return False
        return models.DelegatedValidator.objects.filter(
            event=obj,
            email=request.user.email.lower(),  # type: ignore[union-attr]
        ).exists()
