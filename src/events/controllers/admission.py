from ninja_extra import api_controller, route
from ninja_jwt.authentication import JWTAuth

from common.throttling import AdmissionThrottle
from events import schema
from events.service.admission import AdmissionDecision, AdmissionService, RandomSource, ValidationAttempt
from events.service.admission.effects import default_random_source

from .user_aware_controller import UserAwareController


def get_random_source() -> RandomSource:
    """Source of randomness for effect draws."""
    return default_random_source()


@api_controller("/admission", auth=JWTAuth(), tags=["Admission"], throttle=AdmissionThrottle())
class AdmissionController(UserAwareController):
    @route.post("/validate", url_name="validate_ticket", response=AdmissionDecision)
    def validate(self, payload: schema.ValidateSchema) -> AdmissionDecision:
        """Validate a scanned token or a 4-digit manual code.

        Every expected refusal (invalid or expired code, wrong time, unauthorized validator,
        outside the geofence, no admissions left) is a 200 with `valid: false` and the outcome.
        A `location_required` outcome means the request should be repeated with `validator_location`.
        """
        attempt = ValidationAttempt(
            credential=payload.credential,
            validator=self.user(),
            validator_location=payload.validator_location.to_coordinates() if payload.validator_location else None,
            holder_location=payload.holder_location.to_coordinates() if payload.holder_location else None,
            event_id=payload.event_id,
        )
        return AdmissionService(attempt, rng=get_random_source()).validate()
