"""
Per-side action history.
Both players keep the same append/undo log; only the action payload differs.
"""

from typing import Any, Generic, TypeVar

from uneven_waves.engine.actions import ResistanceAction, SuppressionAction

ActionT = TypeVar("ActionT", ResistanceAction, SuppressionAction)


class Actor(Generic[ActionT]):
    """Ordered history of one side's submitted actions."""

    def __init__(self, action_queue: list[ActionT] | None = None):
        self.action_queue: list[ActionT] = list(action_queue or [])

    def take_action(self, action: ActionT) -> None:
        """Append action. Legality is the round engine's job, not the actor's."""
        self.action_queue.append(action)

    def last_action(self) -> ActionT | None:
        return self.action_queue[-1] if self.action_queue else None

    def undo_action(self) -> ActionT | None:
        """
        Discard the most recent action and return the one now on top (None if empty).
        Callers that need the discarded action must read last_action() first.
        """
        if self.action_queue:
            self.action_queue.pop()
        return self.last_action()

    def __len__(self) -> int:
        return len(self.action_queue)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.action_queue == other.action_queue

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.action_queue!r})"

    def to_dict(self) -> dict[str, Any]:
        return {"action_queue": [a.to_dict() for a in self.action_queue]}


class ResistanceActor(Actor[ResistanceAction]):

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ResistanceActor":
        raw = data.get("action_queue") if isinstance(data, dict) else None
        if not isinstance(raw, list):
            raw = []
        return cls([ResistanceAction.from_dict(a) for a in raw if isinstance(a, dict)])


class SuppressionActor(Actor[SuppressionAction]):

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SuppressionActor":
        raw = data.get("action_queue") if isinstance(data, dict) else None
        if not isinstance(raw, list):
            raw = []
        return cls([SuppressionAction.from_dict(a) for a in raw if isinstance(a, dict)])
