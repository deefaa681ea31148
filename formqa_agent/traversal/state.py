from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Set


class RunPhase(Enum):
    START = "start"
    VISITING = "visiting"
    FILLING = "filling"
    SUBMITTING = "submitting"
    TERMINAL = "terminal"
    SUMMARY_DONE = "summary_done"
    ABORTED = "aborted"
    EXHAUSTED = "exhausted"

    @property
    def is_final(self) -> bool:
        return self in (RunPhase.TERMINAL, RunPhase.SUMMARY_DONE, RunPhase.ABORTED, RunPhase.EXHAUSTED)


@dataclass
class TraversalState:
    """Exploration frontier and visited set for a single run.

    A path is visited at most once; repeat instances carry their UUID in the
    path so every instance is a separate node.
    """

    stack: List[str] = field(default_factory=list)
    visited: Set[str] = field(default_factory=set)
    phase: RunPhase = RunPhase.START
    pending_condition: Optional[str] = None

    def push(self, url: str):
        self.stack.append(url)

    def pop(self) -> Optional[str]:
        return self.stack.pop() if self.stack else None

    def has_pending(self) -> bool:
        return bool(self.stack)

    def is_visited(self, path: str) -> bool:
        return path in self.visited

    def mark_visited(self, path: str):
        self.visited.add(path)
