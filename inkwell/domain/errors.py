"""
Error taxonomy shared by components, adapters and the HTTP layer.

Policy denials are values (see ``inkwell.domain.policy.Decision``); these
exceptions cover infrastructure failures and the HTTP-side denial carrier.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from inkwell.domain.policy import Actor, Decision


class InkwellError(Exception):
    """Base class for application errors."""


class StorageError(InkwellError):
    """Any I/O failure reading or writing persisted state. Never retried here."""


class ConflictError(InkwellError):
    """A write violated a uniqueness or integrity constraint."""


class ProviderUnavailable(InkwellError):
    """The identity provider could not be reached to verify a credential."""


class AccessDenied(InkwellError):
    """Raised by the HTTP layer when a policy decision denies an action."""

    def __init__(self, decision: Decision, actor: Actor | None = None) -> None:
        super().__init__(decision.reason.value if decision.reason else "denied")
        self.decision = decision
        self.actor = actor

    @property
    def status_code(self) -> int:
        """401 for callers that are not logged in, 403 otherwise."""
        if self.actor is not None and not self.actor.is_authenticated:
            return 401
        return self.decision.status_code
