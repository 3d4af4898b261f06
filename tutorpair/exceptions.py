"""
Domain errors raised by the pairing services.

Each error carries the HTTP status the API layer answers with; the handler
registered in main.py does the translation so services stay HTTP-agnostic.
"""


class TutorPairError(Exception):
    """Base class for errors surfaced synchronously to the caller"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RequestValidationFailed(TutorPairError):
    """Empty or unknown timeslots, unknown subject, duplicate active request"""

    status_code = 400


class NotRequestOwner(TutorPairError):
    status_code = 403


class InvalidStateTransition(TutorPairError):
    """Request is terminal or archived and cannot move"""

    status_code = 409


class RequestNotFound(TutorPairError):
    status_code = 404


class ParticipantNotFound(TutorPairError):
    status_code = 404
