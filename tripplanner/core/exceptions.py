from typing import Optional

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse


class TripPlannerError(HTTPException):
    """Base for every domain error surfaced to callers.

    Each subclass fixes an HTTP status and a stable ``kind`` string so the
    client can tell "no permission" apart from "gone" and "bad input".
    """

    status_code = status.HTTP_400_BAD_REQUEST
    kind = "error"
    default_detail = "Request failed"

    def __init__(self, detail: Optional[str] = None, headers: Optional[dict] = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.default_detail,
            headers=headers,
        )


class Unauthenticated(TripPlannerError):
    status_code = status.HTTP_401_UNAUTHORIZED
    kind = "unauthenticated"
    default_detail = "Not authenticated"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class NotFound(TripPlannerError):
    status_code = status.HTTP_404_NOT_FOUND
    kind = "not_found"
    default_detail = "That no longer exists"


class AccessDenied(TripPlannerError):
    status_code = status.HTTP_403_FORBIDDEN
    kind = "access_denied"
    default_detail = "You don't have permission to do that"


class InvalidArgument(TripPlannerError):
    status_code = status.HTTP_400_BAD_REQUEST
    kind = "invalid_argument"
    default_detail = "That input is invalid"


class InvalidCoordinate(InvalidArgument):
    kind = "invalid_coordinate"
    default_detail = "Latitude must be between -90 and 90 and longitude between -180 and 180"


class InvalidReorder(InvalidArgument):
    kind = "invalid_reorder"
    default_detail = "Reorder list must contain exactly the items of the collection"


class InvariantViolation(TripPlannerError):
    status_code = status.HTTP_409_CONFLICT
    kind = "invariant_violation"
    default_detail = "That change would leave the trip in an invalid state"


class NoDefaultPlan(InvariantViolation):
    kind = "no_default_plan"
    default_detail = "No default plan found for this trip"


class UpstreamServiceError(TripPlannerError):
    status_code = status.HTTP_502_BAD_GATEWAY
    kind = "upstream_error"
    default_detail = "An external service is temporarily unavailable"


async def trip_planner_error_handler(request: Request, exc: TripPlannerError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "kind": exc.kind},
        headers=exc.headers,
    )
