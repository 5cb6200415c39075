"""
Domain exceptions raised by the scheduling core.

Degenerate input (no voters, no votes) is never an error; these cover missing
records, storage failures, malformed requests and closed polls.
"""


class SchedulingError(Exception):
    """Base exception for scheduling poll operations."""

    pass


class NotFoundError(SchedulingError):
    """Referenced appointment (or voter) does not exist."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class DataAccessError(SchedulingError):
    """Underlying storage read or write failed."""

    pass


class ValidationError(SchedulingError):
    """Caller passed an unsupported method or a malformed selection."""

    pass


class VotingClosedError(SchedulingError):
    """
    Poll is complete and only existing voters may edit their votes.

    Raised for new voters on every method except minimum-required.
    """

    def __init__(self, appointment_id: str, voter_name: str):
        self.appointment_id = appointment_id
        self.voter_name = voter_name
        super().__init__(
            "Voting for this appointment is complete; only existing voters may re-vote"
        )
