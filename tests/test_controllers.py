from datetime import date

import pytest

from formqa_agent.conditions.graph import ConditionGraph
from formqa_agent.controllers import COMPONENTS_MAPPER, ComponentsInitializer
from formqa_agent.controllers.base import (CHECK, INPUT, SELECT_FIRST,
                                           SELECT_OPTION, TAP, UPLOAD,
                                           Selector)
from formqa_agent.data.form_structures import Component, Page
from formqa_agent.exceptions import (PageDefinitionError,
                                     UnsupportedComponentError)
from formqa_agent.traversal.field_data import (DEFAULT_FIELD_DATA,
                                               merge_field_data)


def controller_for(**component):
    return ComponentsInitializer.initialize_component(Component.model_validate(component))


def test_every_default_field_type_has_a_controller():
    assert set(DEFAULT_FIELD_DATA) <= set(COMPONENTS_MAPPER)


def test_unknown_component_type():
    with pytest.raises(UnsupportedComponentError):
        controller_for(type="SignatureField", name="sig")


def test_page_without_components():
    with pytest.raises(PageDefinitionError):
        ComponentsInitializer.initialize_page(Page(path="/empty"))


def test_text_field_uses_name_selector():
    actions = controller_for(type="TextField", name="fullName", title="Name").actions_for(
        field_data=DEFAULT_FIELD_DATA
    )
    assert actions == [{"type": INPUT, "locate": Selector(css="#fullName"), "param": {"value": "Sample text"}}]


def test_number_field_by_role_and_integer_values():
    controller = controller_for(type="NumberField", name="count", title="How many?")
    [action] = controller.actions_for(12.0)
    assert action["locate"] == Selector(role="textbox", name="How many?")
    assert action["param"]["value"] == "12"
    assert controller.actions_for(2.5)[0]["param"]["value"] == "2.5"


def test_date_parts_are_zero_padded():
    controller = controller_for(type="DatePartsField", name="dob", title="Date of birth")
    actions = controller.actions_for((4, 7, 2001))
    assert [(a["locate"].css, a["param"]["value"]) for a in actions] == [
        ("#dob__day", "04"),
        ("#dob__month", "07"),
        ("#dob__year", "2001"),
    ]
    assert controller.actions_for(date(2020, 12, 25))[0]["param"]["value"] == "25"
    assert [a["param"]["value"] for a in controller.actions_for(field_data=DEFAULT_FIELD_DATA)] == [
        "01", "01", "2000"
    ]


def test_uk_address_skips_empty_parts():
    controller = controller_for(type="UkAddressField", name="home", title="Address")
    actions = controller.actions_for(field_data=DEFAULT_FIELD_DATA)
    assert [a["locate"].css for a in actions] == ["#home__addressLine1", "#home__town", "#home__postcode"]


def test_coordinates_fill_both_parts():
    controller = controller_for(type="LatLongField", name="where", title="Where")
    actions = controller.actions_for(field_data=DEFAULT_FIELD_DATA)
    assert [(a["locate"].name, a["param"]["value"]) for a in actions] == [
        ("Latitude", "51.5074"),
        ("Longitude", "-0.1278"),
    ]


def test_radios_select_first_unless_forced():
    controller = controller_for(type="RadiosField", name="animal", title="Which animal?", list="l-animals")
    [default] = controller.actions_for(field_data=DEFAULT_FIELD_DATA)
    assert default["type"] == SELECT_FIRST
    assert default["locate"] == Selector(role="group", name="Which animal?")
    [forced] = controller.actions_for("Dog")
    assert forced["type"] == SELECT_OPTION
    assert forced["param"] == {"value": "Dog", "kind": "radio"}


def test_yes_no_formats_booleans():
    controller = controller_for(type="YesNoField", name="agree", title="Agree?")
    assert controller.actions_for(False)[0]["param"]["value"] == "No"
    assert controller.actions_for(field_data={})[0]["param"]["value"] == "Yes"


def test_checkboxes_select_each_value():
    controller = controller_for(type="CheckboxesField", name="pets", title="Pets")
    actions = controller.actions_for(["Cat", "Dog"])
    assert [(a["param"]["value"], a["param"]["kind"]) for a in actions] == [("Cat", "checkbox"), ("Dog", "checkbox")]


def test_select_and_autocomplete_selectors():
    select = controller_for(type="SelectField", name="country", title="Country")
    assert select.find() == Selector(role="combobox", name="Country")
    auto = controller_for(type="AutocompleteField", name="town", title="Town")
    [action] = auto.actions_for("Leeds")
    assert action["locate"].css == 'input#town[role="combobox"]'
    assert action["locate"].options_css == "#town__listbox"
    assert action["param"]["kind"] == "autocomplete"


def test_content_fields():
    assert controller_for(type="Markdown", name="intro", content="Hello").actions_for(field_data={}) == []
    [check] = controller_for(type="DeclarationField", name="decl", title="Declaration").actions_for(field_data={})
    assert check["type"] == CHECK
    assert check["locate"].label == "I understand and agree"


def test_file_upload_matches_accepted_type():
    controller = controller_for(
        type="FileUploadField", name="evidence", title="Evidence", options={"accept": "application/pdf,image/png"}
    )
    upload, tap = controller.actions_for(field_data=DEFAULT_FIELD_DATA)
    assert upload["type"] == UPLOAD
    assert upload["locate"].css == 'input[type="file"][id="evidence"]'
    assert upload["param"] == {"file_name": "test-file.pdf", "mime_type": "application/pdf"}
    assert tap["type"] == TAP
    assert tap["param"]["name"] == "Upload file"

    plain = controller_for(type="FileUploadField", name="notes", title="Notes")
    assert plain.actions_for()[0]["param"]["mime_type"] == "text/plain"


def test_controllers_carry_condition_values(animal_form):
    graph = ConditionGraph(animal_form)
    [controller] = ComponentsInitializer.initialize_page(animal_form.page_by_path("/which-animal"), graph)
    assert controller.trigger_value == "Dog"
    assert controller.non_trigger_value == "Cat"
    [plain] = ComponentsInitializer.initialize_page(animal_form.start_page, graph)
    assert plain.trigger_value is None


def test_merge_field_data_overrides_per_type():
    data = merge_field_data({"TextField": "Custom", "NumberField": [3]})
    assert data["TextField"] == ["Custom"]
    assert data["NumberField"] == [3]
    assert data["EmailAddressField"] == DEFAULT_FIELD_DATA["EmailAddressField"]
    assert DEFAULT_FIELD_DATA["TextField"] == ["Sample text"]
