"""Error taxonomy shared by the reconciliation core and its adapters.

Adapters translate library exceptions into these types at the port boundary so
the domain only ever reasons about three failure classes:

- ``ConnectivityError``: transient, safe to re-attempt once the store is back
- ``ConstraintError``: the store rejected the write; needs operator correction
- ``ConfigurationError``: the run cannot proceed with the current selection
"""

from __future__ import annotations

from typing import ClassVar


class ReconciliationError(RuntimeError):
    """Base class for structure reconciliation failures."""

    retryable: ClassVar[bool] = False


class ConnectivityError(ReconciliationError):
    """The catalog store could not be reached or timed out."""

    retryable: ClassVar[bool] = True


class ConstraintError(ReconciliationError):
    """The catalog store rejected a write (duplicate key, foreign key, validation)."""


class ConfigurationError(ReconciliationError):
    """No region selected, or the tree is too shallow to resolve a data structure."""


class ParentNotResolvedError(ReconciliationError):
    """A node was asked to be created before its parent has a catalog id."""


class InvalidTransitionError(ReconciliationError):
    """A run was asked to do something its current state does not allow."""
