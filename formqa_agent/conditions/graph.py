import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional, Tuple

from pydantic import ValidationError

from formqa_agent.conditions import synthesizer
from formqa_agent.conditions.synthesizer import SynthesizedValues
from formqa_agent.data.form_structures import (LIST_ITEM_REF, Component,
                                               Condition, ConditionItem,
                                               FormDefinition, FormList, Page)
from formqa_agent.exceptions import (ComponentNotFoundError, ConfigurationError,
                                     ListItemNotFoundError, ListNotFoundError)
from formqa_agent.utils.log_icon import icon


@dataclass(frozen=True)
class ConditionBinding:
    """One condition item bound to the component it reads, with its values."""

    condition_id: str
    name: str
    coordinator: Optional[str]
    item_id: Optional[str]
    component_id: str
    item: ConditionItem
    values: SynthesizedValues


@dataclass(frozen=True)
class ConditionGap:
    """A condition item that could not be bound, and why."""

    condition_id: str
    item_id: Optional[str]
    component_id: str
    reason: str


def supported_operators() -> List[str]:
    return synthesizer.supported_operators()


def build_list_index(form: FormDefinition) -> Dict[str, FormList]:
    return {form_list.id: form_list for form_list in form.lists}


def find_component(form: FormDefinition, component_id: str) -> Optional[Tuple[Page, Component]]:
    """Locate a component by id, falling back to its field name."""
    for page, component in form.components():
        if component.id == component_id:
            return page, component
    for page, component in form.components():
        if component.name == component_id:
            return page, component
    return None


def find_list_for_component(form: FormDefinition, component_id: str) -> Optional[FormList]:
    found = find_component(form, component_id)
    if found is None or not found[1].list_id:
        return None
    return build_list_index(form).get(found[1].list_id)


def create_conditions_for_form(form: FormDefinition) -> Dict[str, Condition]:
    return {condition.id: condition for condition in form.conditions}


def resolve_condition_for_page(page: Page, conditions_map: Dict[str, Condition]) -> Optional[Condition]:
    if not page.condition:
        return None
    return conditions_map.get(page.condition)


def component_key(component: Component) -> str:
    return component.id or component.name


def _bind_item(
    form: FormDefinition,
    condition: Condition,
    item: ConditionItem,
    today: Optional[date],
) -> ConditionBinding:
    found = find_component(form, item.component_id)
    if found is None:
        raise ComponentNotFoundError(f"Component '{item.component_id}' is not on any page")

    form_list = None
    if item.type == LIST_ITEM_REF:
        try:
            ref = item.item_ref
        except ValidationError as e:
            raise ListItemNotFoundError(f"Malformed list item reference {item.value!r}: {e}")
        list_id = ref.list_id if ref else None
        if list_id:
            form_list = build_list_index(form).get(list_id)
        else:
            form_list = find_list_for_component(form, item.component_id)
        if form_list is None:
            raise ListNotFoundError(
                f"List {list_id or '<component list>'} for component '{item.component_id}' not found"
            )

    values = synthesizer.synthesize(item.operator, item.type, item.value, form_list=form_list, today=today)
    return ConditionBinding(
        condition_id=condition.id,
        name=condition.name,
        coordinator=condition.coordinator,
        item_id=item.id,
        component_id=component_key(found[1]),
        item=item,
        values=values,
    )


def _bind_all(form: FormDefinition, today: Optional[date]) -> Tuple[List[ConditionBinding], List[ConditionGap]]:
    bindings: List[ConditionBinding] = []
    gaps: List[ConditionGap] = []
    for condition in form.conditions:
        for item in condition.items:
            try:
                binding = _bind_item(form, condition, item, today)
            except ConfigurationError as e:
                logging.warning(
                    f"{icon['warning']} Skipping condition '{condition.name}' item {item.id or '?'}: {e}"
                )
                gaps.append(
                    ConditionGap(
                        condition_id=condition.id,
                        item_id=item.id,
                        component_id=item.component_id,
                        reason=str(e),
                    )
                )
                continue
            bindings.append(binding)
    return bindings, gaps


def _group_by_component(bindings: List[ConditionBinding]) -> Dict[str, List[ConditionBinding]]:
    index: Dict[str, List[ConditionBinding]] = {}
    for binding in bindings:
        index.setdefault(binding.component_id, []).append(binding)
    return index


def index_conditions_by_component(
    form: FormDefinition, today: Optional[date] = None
) -> Dict[str, List[ConditionBinding]]:
    """Map each component id to every condition item that reads it.

    Items that cannot be synthesized are logged and left out.
    """
    bindings, _ = _bind_all(form, today)
    return _group_by_component(bindings)


class ConditionGraph:
    """Cached condition indexes for one form definition."""

    def __init__(self, form: FormDefinition, today: Optional[date] = None):
        self.form = form
        self.today = today
        self.conditions = create_conditions_for_form(form)
        self.lists = build_list_index(form)
        self._bindings, self.gaps = _bind_all(form, today)
        self._by_component = _group_by_component(self._bindings)
        self._gated_pages: Dict[str, List[Page]] = {}
        for page in form.pages:
            if page.condition:
                self._gated_pages.setdefault(page.condition, []).append(page)
        logging.debug(f"Condition graph for '{form.name}': {len(self._bindings)} bindings, {len(self.gaps)} gaps")

    @property
    def is_complete(self) -> bool:
        return not self.gaps

    def bindings_for(self, component_id: str) -> List[ConditionBinding]:
        return list(self._by_component.get(component_id, []))

    def bindings_for_condition(self, condition_id: str) -> List[ConditionBinding]:
        return [binding for binding in self._bindings if binding.condition_id == condition_id]

    def binding(self, condition_id: str, item_id: Optional[str] = None) -> Optional[ConditionBinding]:
        """The binding for `condition_id`; its first item when `item_id` is not given."""
        for candidate in self.bindings_for_condition(condition_id):
            if item_id is None or candidate.item_id == item_id:
                return candidate
        return None

    def condition_for_page(self, page: Page) -> Optional[Condition]:
        return resolve_condition_for_page(page, self.conditions)

    def pages_gated_by(self, condition_id: str) -> List[Page]:
        return list(self._gated_pages.get(condition_id, []))

    def all_bindings(self) -> List[ConditionBinding]:
        return list(self._bindings)
