from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from formqa_agent.data.form_structures import Component

INPUT = "Input"
CHECK = "Check"
SELECT_OPTION = "SelectOption"
SELECT_FIRST = "SelectFirst"
UPLOAD = "Upload"
TAP = "Tap"


@dataclass(frozen=True)
class Selector:
    """How a driver finds an element: by ARIA role and name, CSS, or label.

    ``options_css`` points at the popup holding an autocomplete's options.
    """

    role: Optional[str] = None
    name: Optional[str] = None
    css: Optional[str] = None
    label: Optional[str] = None
    exact: bool = True
    options_css: Optional[str] = None

    def describe(self) -> str:
        if self.css:
            return self.css
        if self.role:
            return f"{self.role}[name={self.name!r}]"
        return f"label={self.label!r}"


def input_action(locate: Selector, value: Any) -> Dict[str, Any]:
    return {"type": INPUT, "locate": locate, "param": {"value": str(value)}}


def check_action(locate: Selector) -> Dict[str, Any]:
    return {"type": CHECK, "locate": locate, "param": {}}


def select_option_action(locate: Selector, value: Any, kind: str) -> Dict[str, Any]:
    return {"type": SELECT_OPTION, "locate": locate, "param": {"value": str(value), "kind": kind}}


def select_first_action(locate: Selector, kind: str) -> Dict[str, Any]:
    return {"type": SELECT_FIRST, "locate": locate, "param": {"kind": kind}}


def upload_action(locate: Selector, file_name: str, mime_type: str) -> Dict[str, Any]:
    return {"type": UPLOAD, "locate": locate, "param": {"file_name": file_name, "mime_type": mime_type}}


def tap_action(button_name: str) -> Dict[str, Any]:
    return {"type": TAP, "locate": Selector(role="button", name=button_name), "param": {"name": button_name}}


class BaseFieldController:
    """Turns one component into driver actions for a single page visit."""

    def __init__(self, component: Component, bindings: Sequence = ()):
        self.component = component
        self.conditions = list(bindings)

    @property
    def type(self) -> str:
        return self.component.type

    @property
    def name(self) -> Optional[str]:
        return self.component.name

    @property
    def title(self) -> Optional[str]:
        return self.component.title

    @property
    def id(self) -> Optional[str]:
        return self.component.id

    @property
    def is_required(self) -> bool:
        return self.component.is_required

    @property
    def trigger_value(self):
        return self.conditions[0].values.trigger if self.conditions else None

    @property
    def non_trigger_value(self):
        return self.conditions[0].values.non_trigger if self.conditions else None

    def find(self) -> Selector:
        return Selector(css=f"#{self.name}")

    def fill_actions(self, *values) -> List[Dict[str, Any]]:
        if not values:
            return []
        return [input_action(self.find(), values[0])]

    def default_actions(self, field_data: Dict[str, list]) -> List[Dict[str, Any]]:
        return self.fill_actions(*field_data.get(self.type, []))

    def actions_for(self, value: Any = None, field_data: Optional[Dict[str, list]] = None) -> List[Dict[str, Any]]:
        """Actions answering this component with `value`, or with generic data when None."""
        if value is not None:
            return self.fill_actions(value)
        return self.default_actions(field_data or {})

    def __repr__(self):
        return f"{self.__class__.__name__}(type={self.type!r}, name={self.name!r})"


class BaseGroupFieldController(BaseFieldController):
    """Fields rendered as a fieldset of options; unanswered ones pick the first option."""

    option_kind = "radio"

    def find(self) -> Selector:
        return Selector(role="group", name=self.title)

    def format_value(self, value: Any) -> str:
        return str(value)

    def fill_actions(self, *values) -> List[Dict[str, Any]]:
        if not values or values[0] is None:
            return [select_first_action(self.find(), self.option_kind)]
        value = values[0]
        options = value if isinstance(value, (list, tuple)) else [value]
        return [select_option_action(self.find(), self.format_value(option), self.option_kind) for option in options]

    def default_actions(self, field_data: Dict[str, list]) -> List[Dict[str, Any]]:
        return self.fill_actions(*field_data.get(self.type, []))

    def fallback_actions(self) -> List[Dict[str, Any]]:
        """Used when a generic answer matches none of the rendered options."""
        return [select_first_action(self.find(), self.option_kind)]
