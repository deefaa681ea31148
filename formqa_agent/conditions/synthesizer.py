"""Synthesize input values that satisfy or violate a single condition item.

Every operator maps to one handler in ``_OPERATORS``; each handler
dispatches on the value type. For a target ``t`` the handlers honour this
table, with dates stepping by one day:

=============  ===========  ===============
operator       trigger      non-trigger
=============  ===========  ===============
is             t            differs from t
is not         differs      t
is more than   t + 1        t
is less than   t - 1        t
is at least    t            t - 1
is at most     t            t + 1
=============  ===========  ===============
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from formqa_agent.conditions import date_math
from formqa_agent.data.form_structures import (BOOLEAN_VALUE, DATE_VALUE,
                                               LIST_ITEM_REF, NUMBER_VALUE,
                                               RELATIVE_DATE, VALUE_TYPE_ALIASES,
                                               FormList, ListItem,
                                               RelativeDateValue)
from formqa_agent.exceptions import (InvalidDateError, ListExhaustedError,
                                     ListItemNotFoundError, ListNotFoundError,
                                     UnsupportedOperatorError,
                                     UnsupportedValueTypeError)

IS = "is"
IS_NOT = "is not"
IS_MORE_THAN = "is more than"
IS_LESS_THAN = "is less than"
IS_AT_LEAST = "is at least"
IS_AT_MOST = "is at most"

TRIGGER = "trigger"
NON_TRIGGER = "non_trigger"


@dataclass(frozen=True)
class SynthesizedValues:
    """Trigger and non-trigger inputs for one condition item.

    Dates are ``(day, month, year)`` tuples, list references are item texts.
    ``exhausted_role`` names the role a list could not fill; its value is None.
    """

    operator: str
    value_type: str
    trigger: Any
    non_trigger: Any
    boundary: Any = None
    safe_low: Any = None
    trigger_item: Optional[ListItem] = None
    non_trigger_item: Optional[ListItem] = None
    exhausted_role: Optional[str] = None

    def value_for(self, role: str) -> Any:
        return self.trigger if role == TRIGGER else self.non_trigger

    def require(self, role: str) -> Any:
        """Return the value for `role`, raising ListExhaustedError if the list ran out."""
        if self.exhausted_role == role:
            raise ListExhaustedError(
                f"No list item can act as the {role.replace('_', '-')} value for '{self.operator}'"
            )
        return self.value_for(role)


def normalize_operator(operator: str) -> str:
    return " ".join(str(operator).replace("-", " ").split()).lower()


def normalize_value_type(value_type: str) -> str:
    return VALUE_TYPE_ALIASES.get(value_type, value_type)


def supported_operators():
    return list(_OPERATORS.keys())


def synthesize(
    operator: str,
    value_type: str,
    value: Any,
    form_list: Optional[FormList] = None,
    today: Optional[date] = None,
) -> SynthesizedValues:
    """Produce the trigger/non-trigger pair for a condition item.

    Args:
        operator: Condition operator, e.g. "is at most" or "is-at-most".
        value_type: Value type tag, e.g. NumberValue or RelativeDate.
        value: The condition's target value in its raw JSON form.
        form_list: The list the component draws from, for ListItemRef values.
        today: Reference date for relative dates, defaults to today.

    Raises:
        UnsupportedOperatorError: operator has no handler.
        UnsupportedValueTypeError: value type cannot be used with the operator.
    """
    op = normalize_operator(operator)
    handler = _OPERATORS.get(op)
    if handler is None:
        raise UnsupportedOperatorError(f"Unsupported condition operator: {operator!r}")
    vtype = normalize_value_type(value_type)
    values = handler(op, vtype, value, form_list, today)
    logging.debug(
        f"Synthesized {vtype} '{op}' {value!r}: trigger={values.trigger!r}, non-trigger={values.non_trigger!r}"
    )
    return values


# -- value helpers --------------------------------------------------------


def _number(value: Any):
    if isinstance(value, bool):
        raise UnsupportedValueTypeError(f"Expected a number, got boolean {value!r}")
    if isinstance(value, (int, float)):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise UnsupportedValueTypeError(f"Expected a number, got {value!r}")
    return int(number) if number.is_integer() else number


def _boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise UnsupportedValueTypeError(f"Expected a boolean, got {value!r}")


def _date(value: Any) -> date:
    parsed = date_math.parse_date_string(value)
    if parsed is None:
        raise InvalidDateError(f"Unparseable date value: {value!r}")
    return parsed


def _relative(value: Any) -> RelativeDateValue:
    if isinstance(value, RelativeDateValue):
        return value
    try:
        return RelativeDateValue.model_validate(value)
    except ValidationError as e:
        raise InvalidDateError(f"Invalid relative date value {value!r}: {e}")


def _dmy(value: date):
    return date_math.to_day_month_year(value)


def _date_values(op, vtype, boundary: date, trigger: date, non_trigger: date) -> SynthesizedValues:
    return SynthesizedValues(
        operator=op,
        value_type=vtype,
        trigger=_dmy(trigger),
        non_trigger=_dmy(non_trigger),
        boundary=_dmy(boundary),
    )


def _resolve_item(value: Any, form_list: Optional[FormList]) -> ListItem:
    if form_list is None:
        raise ListNotFoundError(f"No list available for list item reference {value!r}")
    item_id = value.get("itemId", value.get("item_id")) if isinstance(value, dict) else value
    item = form_list.get_item(item_id) if item_id is not None else None
    if item is None:
        raise ListItemNotFoundError(f"Item {item_id!r} not found in list '{form_list.id}'")
    return item


def _list_values(op, vtype, value, form_list, swap: bool) -> SynthesizedValues:
    target = _resolve_item(value, form_list)
    others = form_list.other_items(target.id)
    other = others[0] if others else None
    matching_role, other_role = (NON_TRIGGER, TRIGGER) if swap else (TRIGGER, NON_TRIGGER)
    items = {matching_role: target, other_role: other}
    if other is None:
        logging.warning(f"List '{form_list.id}' has no item other than '{target.id}' for '{op}'")
    return SynthesizedValues(
        operator=op,
        value_type=vtype,
        trigger=items[TRIGGER].text if items[TRIGGER] else None,
        non_trigger=items[NON_TRIGGER].text if items[NON_TRIGGER] else None,
        boundary=target.text,
        trigger_item=items[TRIGGER],
        non_trigger_item=items[NON_TRIGGER],
        exhausted_role=other_role if other is None else None,
    )


def _unsupported(op, vtype) -> UnsupportedValueTypeError:
    return UnsupportedValueTypeError(f"Value type {vtype!r} is not supported for operator '{op}'")


# -- operator handlers ------------------------------------------------------


def _equality(op, vtype, value, form_list, today, negate: bool) -> SynthesizedValues:
    if vtype == NUMBER_VALUE:
        t = _number(value)
        pair = (t + 1, t) if negate else (t, t + 1)
        return SynthesizedValues(op, vtype, pair[0], pair[1], boundary=t)
    if vtype == BOOLEAN_VALUE:
        t = _boolean(value)
        pair = (not t, t) if negate else (t, not t)
        return SynthesizedValues(op, vtype, pair[0], pair[1], boundary=t)
    if vtype in (DATE_VALUE, RELATIVE_DATE):
        if vtype == DATE_VALUE:
            boundary = _date(value)
        else:
            boundary = date_math.resolve_relative_date(_relative(value), today)
        other = date_math.add_days(boundary, 1)
        trigger, non_trigger = (other, boundary) if negate else (boundary, other)
        return _date_values(op, vtype, boundary, trigger, non_trigger)
    if vtype == LIST_ITEM_REF:
        return _list_values(op, vtype, value, form_list, swap=negate)
    raise _unsupported(op, vtype)


def _is(op, vtype, value, form_list, today):
    return _equality(op, vtype, value, form_list, today, negate=False)


def _is_not(op, vtype, value, form_list, today):
    return _equality(op, vtype, value, form_list, today, negate=True)


def _is_more_than(op, vtype, value, form_list, today):
    if vtype == NUMBER_VALUE:
        t = _number(value)
        return SynthesizedValues(op, vtype, t + 1, t, boundary=t, safe_low=max(0, t - 1))
    if vtype == DATE_VALUE:
        boundary = _date(value)
        return _date_values(op, vtype, boundary, date_math.add_days(boundary, 1), boundary)
    if vtype == RELATIVE_DATE:
        relative = _relative(value)
        boundary = date_math.resolve_relative_date(relative, today)
        # "more than N in the past" lies further back, "in the future" further ahead
        step = date_math.direction_multiplier(relative.direction)
        return _date_values(op, vtype, boundary, date_math.add_days(boundary, step), boundary)
    raise _unsupported(op, vtype)


def _is_less_than(op, vtype, value, form_list, today):
    if vtype == NUMBER_VALUE:
        t = _number(value)
        return SynthesizedValues(op, vtype, t - 1, t, boundary=t, safe_low=max(0, t - 1))
    if vtype == DATE_VALUE:
        boundary = _date(value)
        return _date_values(op, vtype, boundary, date_math.add_days(boundary, -1), boundary)
    if vtype == RELATIVE_DATE:
        relative = _relative(value)
        boundary = date_math.resolve_relative_date(relative, today)
        step = -date_math.direction_multiplier(relative.direction)
        return _date_values(op, vtype, boundary, date_math.add_days(boundary, step), boundary)
    raise _unsupported(op, vtype)


def _is_at_least(op, vtype, value, form_list, today):
    if vtype == NUMBER_VALUE:
        t = _number(value)
        return SynthesizedValues(op, vtype, t, t - 1, boundary=t)
    if vtype == DATE_VALUE:
        boundary = _date(value)
        return _date_values(op, vtype, boundary, boundary, date_math.add_days(boundary, -1))
    if vtype == RELATIVE_DATE:
        relative = _relative(value)
        boundary = date_math.resolve_relative_date(relative, today)
        return _date_values(op, vtype, boundary, boundary, date_math.nudge_relative_date(relative, today))
    raise _unsupported(op, vtype)


def _is_at_most(op, vtype, value, form_list, today):
    if vtype == NUMBER_VALUE:
        t = _number(value)
        return SynthesizedValues(op, vtype, t, t + 1, boundary=t)
    if vtype == DATE_VALUE:
        boundary = _date(value)
        return _date_values(op, vtype, boundary, boundary, date_math.add_days(boundary, 1))
    if vtype == RELATIVE_DATE:
        relative = _relative(value)
        boundary = date_math.resolve_relative_date(relative, today)
        step = date_math.direction_multiplier(relative.direction)
        return _date_values(op, vtype, boundary, boundary, date_math.add_days(boundary, step))
    raise _unsupported(op, vtype)


_OPERATORS: Dict[str, Callable[..., SynthesizedValues]] = {
    IS: _is,
    IS_NOT: _is_not,
    IS_MORE_THAN: _is_more_than,
    IS_LESS_THAN: _is_less_than,
    IS_AT_LEAST: _is_at_least,
    IS_AT_MOST: _is_at_most,
}
