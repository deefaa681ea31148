import logging
from typing import List, Optional

from formqa_agent.conditions.graph import ConditionGraph
from formqa_agent.data.form_structures import Component, Page
from formqa_agent.exceptions import PageDefinitionError, UnsupportedComponentError

from .base import BaseFieldController, BaseGroupFieldController, Selector
from .choice_fields import (AutocompleteFieldController,
                            CheckboxesFieldController, RadiosFieldController,
                            SelectFieldController, YesNoFieldController)
from .composite_fields import (DatePartsFieldController,
                               EastingNorthingFieldController,
                               LatLongFieldController,
                               UkAddressFieldController)
from .content_fields import (DeclarationFieldController,
                             FileUploadFieldController, MarkdownController)
from .text_fields import (EmailAddressFieldController,
                          MultilineTextFieldController,
                          NationalGridFieldNumberController,
                          NumberFieldController, OsGridRefFieldController,
                          TelephoneNumberFieldController, TextFieldController)

COMPONENTS_MAPPER = {
    "TextField": TextFieldController,
    "MultilineTextField": MultilineTextFieldController,
    "NumberField": NumberFieldController,
    "EmailAddressField": EmailAddressFieldController,
    "TelephoneNumberField": TelephoneNumberFieldController,
    "OsGridRefField": OsGridRefFieldController,
    "NationalGridFieldNumberField": NationalGridFieldNumberController,
    "DatePartsField": DatePartsFieldController,
    "UkAddressField": UkAddressFieldController,
    "EastingNorthingField": EastingNorthingFieldController,
    "LatLongField": LatLongFieldController,
    "RadiosField": RadiosFieldController,
    "YesNoField": YesNoFieldController,
    "CheckboxesField": CheckboxesFieldController,
    "SelectField": SelectFieldController,
    "AutocompleteField": AutocompleteFieldController,
    "DeclarationField": DeclarationFieldController,
    "FileUploadField": FileUploadFieldController,
    "Markdown": MarkdownController,
}


class ComponentsInitializer:
    @staticmethod
    def initialize_component(component: Component, graph: Optional[ConditionGraph] = None) -> BaseFieldController:
        """Build the controller for `component`, with the conditions that read it."""
        controller_cls = COMPONENTS_MAPPER.get(component.type)
        if controller_cls is None:
            raise UnsupportedComponentError(f"Unsupported component type: {component.type}")
        bindings = []
        if graph is not None:
            key = component.id or component.name
            bindings = graph.bindings_for(key) if key else []
        return controller_cls(component, bindings)

    @staticmethod
    def initialize_page(page: Page, graph: Optional[ConditionGraph] = None) -> List[BaseFieldController]:
        if not page.components:
            raise PageDefinitionError(f"No components found on page: {page.path}")
        controllers = [ComponentsInitializer.initialize_component(c, graph) for c in page.components]
        logging.debug(f"Initialized {len(controllers)} components on page: {page.path}")
        return controllers


__all__ = [
    "BaseFieldController",
    "BaseGroupFieldController",
    "COMPONENTS_MAPPER",
    "ComponentsInitializer",
    "Selector",
]
