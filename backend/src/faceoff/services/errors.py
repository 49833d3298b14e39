"""Errors raised by session services.

Mutation errors are request-scoped: they are raised before any state change,
returned to the caller and never broadcast. Transport errors stay local to
the viewer that hit them.
"""


class FaceoffError(Exception):
    """Base class for recoverable Faceoff errors."""

    status_code: int = 400
    code: str = "faceoff_error"


class DuplicateSignup(FaceoffError):
    status_code = 409
    code = "duplicate_signup"

    def __init__(self, name: str):
        super().__init__(f"Player '{name}' is already signed up")
        self.name = name


class CapacityExceeded(FaceoffError):
    status_code = 409
    code = "capacity_exceeded"

    def __init__(self, capacity: int):
        super().__init__(f"Session is full ({capacity} players)")
        self.capacity = capacity


class InsufficientPlayers(FaceoffError):
    status_code = 400
    code = "insufficient_players"

    def __init__(self, count: int, minimum: int = 2):
        super().__init__(f"At least {minimum} players are needed to split teams (have {count})")
        self.count = count
        self.minimum = minimum


class ParticipantNotFound(FaceoffError):
    status_code = 404
    code = "participant_not_found"

    def __init__(self, participant_id: int):
        super().__init__(f"Participant not found: {participant_id}")
        self.participant_id = participant_id


class TransportFailure(FaceoffError):
    """Delivery or fetch failure on the viewer side. Logged, never fatal."""

    status_code = 502
    code = "transport_failure"
