"""
Component base class for validated data records.

Components are small Pydantic models holding combatant or item data. They
may expose narrow helpers that keep their own invariants (clamping,
derived values); battle flow lives in the framework layer.

Usage:
    class Health(Component):
        current: int = 100
        max_hp: int = 100
"""

from pydantic import BaseModel, ConfigDict


class Component(BaseModel):
    """
    Base class for all components.

    Field values are validated on construction and on every assignment,
    and unknown fields are rejected.
    """

    model_config = ConfigDict(
        # Allow arbitrary types (for references)
        arbitrary_types_allowed=True,
        validate_assignment=True,
        # Reject misspelled fields
        extra='forbid',
    )
