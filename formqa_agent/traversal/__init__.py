from .engine import (Annotation, BranchTarget, ConditionCheck,
                     FormTraversalEngine, TraversalReport)
from .state import RunPhase, TraversalState

__all__ = [
    "Annotation",
    "BranchTarget",
    "ConditionCheck",
    "FormTraversalEngine",
    "RunPhase",
    "TraversalReport",
    "TraversalState",
]
