"""Reference evaluation of a condition item against an answer.

Used to check that synthesized trigger values satisfy a condition and
non-trigger values do not, independently of how they were produced.
"""

import operator as op_module
from datetime import date
from typing import Any, Optional

from formqa_agent.conditions import date_math
from formqa_agent.conditions.synthesizer import (IS, IS_AT_LEAST, IS_AT_MOST,
                                                 IS_LESS_THAN, IS_MORE_THAN,
                                                 IS_NOT, normalize_operator,
                                                 normalize_value_type)
from formqa_agent.data.form_structures import (BOOLEAN_VALUE, DATE_VALUE,
                                               LIST_ITEM_REF, NUMBER_VALUE,
                                               RELATIVE_DATE,
                                               RelativeDateValue)
from formqa_agent.exceptions import (InvalidDateError,
                                     UnsupportedOperatorError,
                                     UnsupportedValueTypeError)

_COMPARATORS = {
    IS: op_module.eq,
    IS_NOT: op_module.ne,
    IS_MORE_THAN: op_module.gt,
    IS_LESS_THAN: op_module.lt,
    IS_AT_LEAST: op_module.ge,
    IS_AT_MOST: op_module.le,
}

# Relative dates in the past count backwards from today: "more than 10 days
# in the past" is an earlier date than the boundary.
_PAST_COMPARATORS = {
    IS: op_module.eq,
    IS_NOT: op_module.ne,
    IS_MORE_THAN: op_module.lt,
    IS_LESS_THAN: op_module.gt,
    IS_AT_LEAST: op_module.le,
    IS_AT_MOST: op_module.ge,
}


def _as_date(value: Any) -> date:
    if isinstance(value, (tuple, list)) and len(value) == 3:
        return date_math.from_day_month_year(tuple(int(part) for part in value))
    parsed = date_math.parse_date_string(value)
    if parsed is None:
        raise InvalidDateError(f"Unparseable date value: {value!r}")
    return parsed


def evaluate(operator: str, value_type: str, actual: Any, target: Any, today: Optional[date] = None) -> bool:
    """Return True when `actual` satisfies `<operator> <target>`.

    Dates may be given as ``(day, month, year)`` tuples or ISO strings.
    ListItemRef answers and targets are compared as item texts or ids,
    whichever the caller passes for both.
    """
    op = normalize_operator(operator)
    if op not in _COMPARATORS:
        raise UnsupportedOperatorError(f"Unsupported condition operator: {operator!r}")
    vtype = normalize_value_type(value_type)

    if vtype == NUMBER_VALUE:
        return _COMPARATORS[op](float(actual), float(target))
    if vtype == DATE_VALUE:
        return _COMPARATORS[op](_as_date(actual), _as_date(target))
    if vtype == RELATIVE_DATE:
        relative = target if isinstance(target, RelativeDateValue) else RelativeDateValue.model_validate(target)
        boundary = date_math.resolve_relative_date(relative, today)
        comparators = _PAST_COMPARATORS if relative.direction == date_math.PAST else _COMPARATORS
        return comparators[op](_as_date(actual), boundary)
    if op not in (IS, IS_NOT):
        raise UnsupportedValueTypeError(f"Value type {vtype!r} is not supported for operator '{op}'")
    if vtype == BOOLEAN_VALUE:
        return _COMPARATORS[op](bool(actual), bool(target))
    if vtype == LIST_ITEM_REF:
        return _COMPARATORS[op](actual, target)
    raise UnsupportedValueTypeError(f"Unknown value type: {value_type!r}")
