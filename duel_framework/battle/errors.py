"""
Battle errors.

Benign out-of-order calls (dead actor, finished battle, dead target) are
silent no-ops and never raise. These exceptions cover misconfiguration
that a caller has to fix.
"""


class BattleError(Exception):
    """Base class for battle errors."""


class TargetSelectionError(BattleError):
    """Target selection is required but missing or returned an invalid target."""


class DefinitionError(BattleError):
    """A requested definition id is unknown or malformed."""
