"""Error taxonomy for route planning."""
from __future__ import annotations


class PlanningError(Exception):
    """Base class for every error raised while planning a walk."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(PlanningError):
    """The request is malformed; surfaced to the caller verbatim."""

    status_code = 422


class ResolutionError(PlanningError):
    """A start or end place reference could not be turned into coordinates."""

    status_code = 404


class CollaboratorError(PlanningError):
    """A single external call failed. Always soft-failed by the planner."""

    status_code = 502

    def __init__(self, message: str, *, collaborator: str = "") -> None:
        super().__init__(message)
        self.collaborator = collaborator


class CollaboratorTimeout(CollaboratorError):
    status_code = 504


class InsufficientCandidatesError(PlanningError):
    """No candidate survived, even after the synthetic fallback."""

    status_code = 503


class ConfigurationError(PlanningError):
    """Production collaborators could not be built, e.g. a missing API key."""

    status_code = 503
