import typing as t
from uuid import UUID

from django.db.models import QuerySet
from django.shortcuts import get_object_or_404
from ninja_extra import api_controller, route
from ninja_jwt.authentication import JWTAuth

from common.schema import ValidationErrorResponse
from common.throttling import UserDefaultThrottle, WriteThrottle
from events import models, schema
from events.controllers.permissions import EventPermission
from events.service.admission import admission_stats

from .user_aware_controller import UserAwareController


@api_controller("/events/{event_id}", auth=JWTAuth(), tags=["Event Validators"], throttle=UserDefaultThrottle())
class EventValidatorsController(UserAwareController):
    """Event owner endpoints for delegated validators and admission statistics."""

    def get_queryset(self) -> QuerySet[models.Event]:
        return models.Event.objects.validatable_by(self.user())

    def get_one(self, event_id: UUID) -> models.Event:
        """Wrapper helper."""
        return t.cast(models.Event, self.get_object_or_exception(self.get_queryset(), pk=event_id))

    @route.get(
        "/validators",
        url_name="list_validators",
        response=list[schema.DelegatedValidatorSchema],
        permissions=[EventPermission("manage_validators")],
    )
    def list_validators(self, event_id: UUID) -> QuerySet[models.DelegatedValidator]:
        event = self.get_one(event_id)
        return models.DelegatedValidator.objects.filter(event=event)

    @route.post(
        "/validators",
        url_name="add_validator",
        response={201: schema.DelegatedValidatorSchema, 400: ValidationErrorResponse},
        permissions=[EventPermission("manage_validators")],
        throttle=WriteThrottle(),
    )
    def add_validator(
        self, event_id: UUID, payload: schema.DelegatedValidatorCreateSchema
    ) -> tuple[int, models.DelegatedValidator]:
        """Allow the owner of this email address to validate tickets for the event."""
        event = self.get_one(event_id)
        validator = models.DelegatedValidator.objects.create(event=event, email=payload.email, added_by=self.user())
        return 201, validator

    @route.delete(
        "/validators/{validator_id}",
        url_name="remove_validator",
        response={204: None},
        permissions=[EventPermission("manage_validators")],
        throttle=WriteThrottle(),
    )
    def remove_validator(self, event_id: UUID, validator_id: UUID) -> tuple[int, None]:
        event = self.get_one(event_id)
        get_object_or_404(models.DelegatedValidator, pk=validator_id, event=event).delete()
        return 204, None

    @route.get(
        "/admission-stats",
        url_name="admission_stats",
        response=schema.AdmissionStatsSchema,
        permissions=[EventPermission("view_admission_stats")],
    )
    def get_admission_stats(self, event_id: UUID) -> dict[str, object]:
        """Ticket and admission counters. Available to the owner and delegated validators."""
        return admission_stats(self.get_one(event_id))
