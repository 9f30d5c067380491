"""Data types for the actions available to a cart-pole controller."""

from enum import Enum


class Action(str, Enum):
    """Actions that the controller can take."""

    LEFT = "left"
    RIGHT = "right"

    @property
    def force_direction(self) -> int:
        """Signed unit force multiplier passed to the physics step."""
        return -1 if self is Action.LEFT else 1


# Output slot order of the policy network: index 0 pushes left, index 1 pushes right
ACTION_SET = [Action.LEFT, Action.RIGHT]


def action_from_index(index: int) -> Action:
    """Map a policy output index to its action."""
    return ACTION_SET[index]
