import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Page controller kinds the traversal treats specially
TERMINAL_PAGE_CONTROLLER = "TerminalPageController"
SUMMARY_PAGE_CONTROLLER = "SummaryPageWithConfirmationEmailController"
REPEAT_PAGE_CONTROLLER = "RepeatPageController"

# Value type tags used by condition items
NUMBER_VALUE = "NumberValue"
BOOLEAN_VALUE = "BooleanValue"
DATE_VALUE = "DateValue"
RELATIVE_DATE = "RelativeDate"
LIST_ITEM_REF = "ListItemRef"

VALUE_TYPE_ALIASES = {
    "RelativeDateValue": RELATIVE_DATE,
}


class FormModel(BaseModel):
    """Base for every form-definition model: camelCase JSON, immutable once loaded."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


class ListItem(FormModel):
    id: str
    text: str
    value: Any = None


class FormList(FormModel):
    """Ordered, immutable set of selectable items owned by the form."""

    id: str
    name: Optional[str] = None
    title: Optional[str] = None
    type: Optional[str] = None
    items: Tuple[ListItem, ...] = ()

    @field_validator("items")
    @classmethod
    def _unique_ids(cls, items):
        seen = set()
        for item in items:
            if item.id in seen:
                raise ValueError(f"Duplicate list item id: {item.id}")
            seen.add(item.id)
        return items

    def get_item(self, item_id: str) -> Optional[ListItem]:
        return next((item for item in self.items if item.id == item_id), None)

    def find_item_by_text(self, text: str) -> Optional[ListItem]:
        return next((item for item in self.items if item.text == text), None)

    def find_item_by_value(self, value: Any) -> Optional[ListItem]:
        return next((item for item in self.items if item.value == value), None)

    def other_items(self, item_id: str) -> List[ListItem]:
        """Items other than `item_id`, in declaration order."""
        return [item for item in self.items if item.id != item_id]

    def all_texts(self) -> List[str]:
        return [item.text for item in self.items]

    def first_item(self) -> Optional[ListItem]:
        return self.items[0] if self.items else None

    def __len__(self) -> int:
        return len(self.items)


class RelativeDateValue(FormModel):
    """Recipe for a date relative to "now", e.g. 10 days in the past."""

    period: int = Field(gt=0)
    unit: str = "days"
    direction: str

    @field_validator("unit")
    @classmethod
    def _known_unit(cls, unit):
        if unit not in ("days", "months", "years"):
            raise ValueError(f"Unsupported relative date unit: {unit}")
        return unit


class ListItemRefValue(FormModel):
    item_id: str
    list_id: Optional[str] = None


class ConditionItem(FormModel):
    id: Optional[str] = None
    component_id: str
    operator: str
    type: str
    value: Any = None

    @field_validator("type")
    @classmethod
    def _canonical_type(cls, value_type):
        return VALUE_TYPE_ALIASES.get(value_type, value_type)

    @property
    def relative_date(self) -> Optional[RelativeDateValue]:
        if self.type != RELATIVE_DATE or not isinstance(self.value, dict):
            return None
        return RelativeDateValue.model_validate(self.value)

    @property
    def item_ref(self) -> Optional[ListItemRefValue]:
        if self.type != LIST_ITEM_REF or not isinstance(self.value, dict):
            return None
        return ListItemRefValue.model_validate(self.value)


class Condition(FormModel):
    id: str
    display_name: str = ""
    coordinator: Optional[str] = None
    items: Tuple[ConditionItem, ...] = ()

    @property
    def name(self) -> str:
        return self.display_name or self.id

    @property
    def is_composite(self) -> bool:
        return len(self.items) > 1


class Component(FormModel):
    id: Optional[str] = None
    type: str
    name: Optional[str] = None
    title: Optional[str] = None
    hint: Optional[str] = None
    content: Optional[str] = None
    short_description: Optional[str] = None
    options: Dict[str, Any] = Field(default_factory=dict)
    list_id: Optional[str] = Field(default=None, alias="list")

    @property
    def is_required(self) -> bool:
        return self.options.get("required") is True


class Page(FormModel):
    id: Optional[str] = None
    path: str
    title: Optional[str] = None
    controller: Optional[str] = None
    components: Tuple[Component, ...] = ()
    condition: Optional[str] = None

    @property
    def label(self) -> str:
        return self.title or self.path

    @property
    def is_terminal(self) -> bool:
        return self.controller == TERMINAL_PAGE_CONTROLLER

    @property
    def is_summary(self) -> bool:
        return self.controller == SUMMARY_PAGE_CONTROLLER

    @property
    def is_repeat(self) -> bool:
        return self.controller == REPEAT_PAGE_CONTROLLER


class FormDefinition(FormModel):
    name: str
    pages: Tuple[Page, ...]
    lists: Tuple[FormList, ...] = ()
    conditions: Tuple[Condition, ...] = ()

    @field_validator("pages")
    @classmethod
    def _has_pages(cls, pages):
        if not pages:
            raise ValueError("Form definition has no pages")
        return pages

    @property
    def start_page(self) -> Page:
        return self.pages[0]

    @property
    def slug(self) -> str:
        from formqa_agent.traversal.paths import create_form_slug

        return create_form_slug(self.name)

    def page_by_path(self, path: str) -> Optional[Page]:
        return next((page for page in self.pages if page.path == path), None)

    def condition_by_id(self, condition_id: str) -> Optional[Condition]:
        return next((c for c in self.conditions if c.id == condition_id), None)

    def components(self):
        """Yield (page, component) for every component in declaration order."""
        for page in self.pages:
            for component in page.components:
                yield page, component

    @classmethod
    def load(cls, path: Union[str, Path]) -> "FormDefinition":
        """Read and validate a form definition JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        form = cls.model_validate(raw)
        logging.debug(
            f"Loaded form '{form.name}' from {path}: {len(form.pages)} pages, "
            f"{len(form.lists)} lists, {len(form.conditions)} conditions"
        )
        return form
