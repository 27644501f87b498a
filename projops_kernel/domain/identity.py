"""
Actor identity passed explicitly into every operation that attributes an
action (delay logs, baseline locks, PO creation and dispatch).
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Actor:
    """The user performing an action.

    ``user_id`` is the identity provider's opaque id; ``display_name`` is
    copied onto audit records so they read without a join.
    """

    user_id: str
    display_name: str = ""

    def __post_init__(self) -> None:
        if not self.user_id or not self.user_id.strip():
            raise ValueError("Actor user_id is required")

    @property
    def label(self) -> str:
        return self.display_name or self.user_id

