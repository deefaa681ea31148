from .evaluator import evaluate
from .graph import (ConditionBinding, ConditionGap, ConditionGraph,
                    build_list_index, create_conditions_for_form,
                    find_list_for_component, index_conditions_by_component,
                    resolve_condition_for_page, supported_operators)
from .synthesizer import NON_TRIGGER, TRIGGER, SynthesizedValues, synthesize

__all__ = [
    "ConditionBinding",
    "ConditionGap",
    "ConditionGraph",
    "NON_TRIGGER",
    "SynthesizedValues",
    "TRIGGER",
    "build_list_index",
    "create_conditions_for_form",
    "evaluate",
    "find_list_for_component",
    "index_conditions_by_component",
    "resolve_condition_for_page",
    "supported_operators",
    "synthesize",
]
