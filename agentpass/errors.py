"""Exception hierarchy shared across the AgentPass packages.

Only registration problems reach callers as exceptions.  Collaborator
failures are caught at the :class:`~agentpass.cognition.dispatch.DispatchEngine`
boundary and rendered as text; unknown agent ids are reported as ``None``.
"""

from __future__ import annotations


class AgentPassError(Exception):
    """Base class for all AgentPass errors."""


class AgentValidationError(AgentPassError, ValueError):
    """Registration data failed validation (e.g. empty name or version)."""


class CollaboratorError(AgentPassError):
    """An external collaborator (command handler, completion client) failed."""


class CommandError(CollaboratorError):
    """The structured-command collaborator could not complete a request."""


class CompletionError(CollaboratorError):
    """The completion client failed to produce a response.

    Attributes:
        detail: Most specific failure description available.
        status_code: HTTP status returned by the provider, if any.
    """

    def __init__(self, detail: str, status_code: int | None = None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code
