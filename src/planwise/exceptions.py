"""Custom exceptions for the planwise engine."""


class PlanwiseError(Exception):
    """Base exception for all planwise errors."""


class NotFoundError(PlanwiseError):
    """Raised when a task, occurrence, recurrence or event does not exist."""

    def __init__(self, resource: str, resource_id: str):
        super().__init__(f"{resource} '{resource_id}' not found")
        self.resource = resource
        self.resource_id = resource_id


class ConfigurationError(PlanwiseError):
    """Raised when a task or recurrence is configured inconsistently.

    Covers fixed tasks without their time slot or schedule, open-ended
    fixed repetition and chaining a task that has no recurrence. Mixed
    weekday and day-of-month selections fail earlier, as a pydantic
    ``ValidationError`` from the recurrence models.
    """


class InvalidTransitionError(PlanwiseError):
    """Raised when an occurrence status change is not in the transition table."""

    def __init__(self, current: str, requested: str):
        super().__init__(f"Cannot move occurrence from {current} to {requested}")
        self.current = current
        self.requested = requested
