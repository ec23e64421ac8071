# listings/exceptions.py


class ListingError(Exception):
    """Base for errors the listing pipeline reports to the boundary layer.

    ``kind`` is a stable tag the views use to pick a status code and a
    redirect target; ``message`` is safe to show to the user.
    """

    kind = "error"

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def as_dict(self):
        return {"error": self.kind, "message": self.message}


class ValidationError(ListingError):
    """Malformed or missing field. User-correctable, shown verbatim."""

    kind = "validation"

    def __init__(self, message, fields=None):
        super().__init__(message)
        self.fields = fields or {}


class NotFoundError(ListingError):
    kind = "not_found"


class ForbiddenError(ListingError):
    kind = "forbidden"


class UpstreamDegraded(ListingError):
    """The geocoder failed. Never leaves the geocoding module."""

    kind = "upstream_degraded"


class PersistenceError(ListingError):
    kind = "persistence"


class UploadFailed(ListingError):
    kind = "upload_failed"
