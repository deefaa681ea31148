from typing import Any, Dict, List

from formqa_agent.controllers.base import (BaseGroupFieldController, Selector,
                                           select_option_action)


class RadiosFieldController(BaseGroupFieldController):
    option_kind = "radio"


class YesNoFieldController(BaseGroupFieldController):
    option_kind = "radio"

    def format_value(self, value: Any) -> str:
        if isinstance(value, bool):
            return "Yes" if value else "No"
        return str(value)

    def default_actions(self, field_data: Dict[str, list]) -> List[Dict[str, Any]]:
        return self.fill_actions(*field_data.get(self.type, ["Yes"]))


class CheckboxesFieldController(BaseGroupFieldController):
    option_kind = "checkbox"


class SelectFieldController(BaseGroupFieldController):
    option_kind = "select"

    def find(self) -> Selector:
        return Selector(role="combobox", name=self.title)


class AutocompleteFieldController(BaseGroupFieldController):
    option_kind = "autocomplete"

    def find(self) -> Selector:
        return Selector(css=f'input#{self.name}[role="combobox"]', options_css=f"#{self.name}__listbox")

    def fill_actions(self, *values) -> List[Dict[str, Any]]:
        if values and values[0] is not None and not isinstance(values[0], (list, tuple)):
            return [select_option_action(self.find(), values[0], self.option_kind)]
        return super().fill_actions(*values)
