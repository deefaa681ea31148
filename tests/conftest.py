import os
import re

import pytest

from formqa_agent.conditions.evaluator import evaluate
from formqa_agent.conditions.graph import component_key, find_component
from formqa_agent.data.form_structures import (BOOLEAN_VALUE, LIST_ITEM_REF,
                                               FormDefinition)
from formqa_agent.traversal.paths import (build_form_url,
                                          extract_path_from_url,
                                          find_page_by_path,
                                          is_repeat_page_instance,
                                          is_repeat_summary_path,
                                          summary_submit_button_text)

BASE_URL = "http://localhost:3009"
REPEAT_INSTANCE_ID = "0f8fad5b-d9cb-469f-a165-70867728950e"
DATA_DIR = os.path.join(os.path.dirname(__file__), "data")


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        '--form',
        action='store',
        default=None,
        help='Form definition JSON for the traversal tests (overrides the bundled sample)',
    )


@pytest.fixture
def form_path(request: pytest.FixtureRequest) -> str:
    # Priority: CLI --form > bundled report-an-animal form
    return request.config.getoption('--form') or os.path.join(DATA_DIR, 'report-an-animal.json')


@pytest.fixture
def animal_form(form_path) -> FormDefinition:
    return FormDefinition.load(form_path)


def build_form(pages, lists=(), conditions=(), name="Test Form") -> FormDefinition:
    return FormDefinition.model_validate(
        {"name": name, "pages": list(pages), "lists": list(lists), "conditions": list(conditions)}
    )


def text_page(path, name, required=False, condition=None, controller=None):
    page = {
        "path": path,
        "title": name,
        "components": [
            {"id": f"c-{name}", "type": "TextField", "name": name, "title": name, "options": {"required": required}}
        ],
    }
    if condition:
        page["condition"] = condition
    if controller:
        page["controller"] = controller
    return page


@pytest.fixture
def make_form():
    return build_form


@pytest.fixture
def make_text_page():
    return text_page


class FakeFormDriver:
    """In-memory form runtime.

    Routes like the real runner: the next page is the first later page whose
    condition holds, repeat pages get an instance id and a summary, summary
    pages submit to /status. ``routes`` overrides the next path for a path.
    """

    def __init__(
        self,
        form,
        base_url=BASE_URL,
        today=None,
        routes=None,
        add_another_paths=(),
        terminal_continue=False,
    ):
        self.form = form
        self.base_url = base_url
        self.today = today
        self.routes = dict(routes or {})
        self.add_another_paths = set(add_another_paths)
        self.terminal_continue = terminal_continue
        self.path = None
        self.answers = {}
        self.calls = []
        self.errors = 0
        self.submitted = False

    # -- lookup ----------------------------------------------------------

    def _page(self):
        return find_page_by_path(self.form, self.path) if self.path else None

    def _component(self, selector):
        """(component, part) addressed by `selector` on the current page."""
        page = self._page()
        if page is None:
            return None, None
        components = page.components
        if selector.css:
            match = re.search(r'id="([\w-]+)"', selector.css) or re.search(r"#([\w-]+)", selector.css)
            if match:
                name, _, part = match.group(1).partition("__")
                for component in components:
                    if component.name == name:
                        return component, part or None
        if selector.role and selector.name:
            for component in components:
                if component.title == selector.name:
                    return component, None
        if selector.label:
            for component in components:
                if component.type == "DeclarationField":
                    return component, None
        return None, None

    def _options(self, component):
        if component.type == "YesNoField":
            return ["Yes", "No"]
        if component.list_id:
            form_list = next((fl for fl in self.form.lists if fl.id == component.list_id), None)
            return form_list.all_texts() if form_list else []
        return []

    # -- FormDriver ------------------------------------------------------

    async def navigate(self, url):
        self.calls.append(("navigate", url))
        self.path = self._arrive(extract_path_from_url(url, self.form.slug))
        return True

    async def current_url(self):
        return build_form_url(self.base_url, self.form, self.path)

    async def fill_field(self, selector, value):
        self.calls.append(("fill", selector.describe(), value))
        component, part = self._component(selector)
        if component is None:
            return False
        key = component_key(component)
        if part:
            self.answers.setdefault(key, {})[part] = value
        else:
            self.answers[key] = value
        return True

    async def select_choice(self, selector, value, kind="radio"):
        self.calls.append(("select", selector.describe(), value))
        component, _ = self._component(selector)
        if component is None or value not in self._options(component):
            return False
        key = component_key(component)
        if kind == "checkbox":
            self.answers.setdefault(key, []).append(value)
        else:
            self.answers[key] = value
        return True

    async def select_first(self, selector, kind="radio"):
        component, _ = self._component(selector)
        options = self._options(component) if component is not None else []
        if not options:
            return False
        return await self.select_choice(selector, options[0], kind)

    async def check(self, selector):
        self.calls.append(("check", selector.describe()))
        component, _ = self._component(selector)
        if component is None:
            return False
        self.answers[component_key(component)] = True
        return True

    async def upload_file(self, selector, file_name, mime_type):
        self.calls.append(("upload", selector.describe(), file_name, mime_type))
        component, _ = self._component(selector)
        if component is None:
            return False
        self.answers[component_key(component)] = file_name
        return True

    async def click_button(self, name):
        self.calls.append(("click", name))
        page = self._page()
        if name.lower() == "continue":
            return await self.submit()
        if name == "Upload file":
            return True
        if page is not None and page.is_summary and name == summary_submit_button_text(page):
            self.submitted = True
            self.path = "/status"
            return True
        return False

    async def submit(self):
        self.calls.append(("submit", self.path))
        page = self._page()
        if page is None:
            return False
        if not is_repeat_summary_path(self.form, self.path):
            missing = [
                c for c in page.components
                if c.is_required and component_key(c) not in self.answers
            ]
            if missing:
                self.errors = len(missing)
                return True
        self.errors = 0
        self.path = self._next_path(page)
        return True

    async def wait_for_ready(self):
        return None

    async def count_buttons(self, name):
        if name == "Add another":
            found = is_repeat_summary_path(self.form, self.path) or self.path in self.add_another_paths
            return 1 if found else 0
        if name == "Continue":
            page = self._page()
            if page is None or page.is_summary:
                return 0
            if page.is_terminal:
                return 1 if self.terminal_continue else 0
            return 1
        return 0

    async def error_summary_count(self):
        return self.errors

    # -- routing ---------------------------------------------------------

    def _arrive(self, path):
        page = self.form.page_by_path(path)
        if page is not None and page.is_repeat:
            return f"{path}/{REPEAT_INSTANCE_ID}"
        return path

    def _next_path(self, page):
        if self.path in self.routes:
            return self._arrive(self.routes[self.path])
        if is_repeat_page_instance(self.path):
            return f"{page.path}/summary"
        index = self.form.pages.index(page)
        for candidate in self.form.pages[index + 1:]:
            if candidate.condition is None or self._holds(candidate.condition):
                return self._arrive(candidate.path)
        return "/status"

    def _holds(self, condition_id):
        condition = self.form.condition_by_id(condition_id)
        results = [self._item_holds(item) for item in condition.items]
        return any(results) if condition.coordinator == "or" else all(results)

    def _item_holds(self, item):
        found = find_component(self.form, item.component_id)
        if found is None:
            return False
        component = found[1]
        answer = self.answers.get(component_key(component))
        if answer is None:
            return False
        target = item.value
        if item.type == LIST_ITEM_REF:
            ref = item.item_ref
            list_id = ref.list_id or component.list_id
            form_list = next(fl for fl in self.form.lists if fl.id == list_id)
            target = form_list.get_item(ref.item_id).text
        elif item.type == BOOLEAN_VALUE:
            answer = answer == "Yes"
        if isinstance(answer, dict):
            answer = (int(answer["day"]), int(answer["month"]), int(answer["year"]))
        return evaluate(item.operator, item.type, answer, target, today=self.today)


class FakeSession:
    """Stands in for BrowserSession: every initialize or reset starts a new FakeFormDriver."""

    def __init__(self, form, **driver_options):
        self.form = form
        self.driver_options = driver_options
        self.driver = None
        self.drivers = []
        self.initialized = False
        self.resets = 0
        self.closed = False

    def _new_driver(self):
        self.driver = FakeFormDriver(self.form, **self.driver_options)
        self.drivers.append(self.driver)

    async def initialize(self):
        self.initialized = True
        self._new_driver()

    async def reset(self):
        self.resets += 1
        self._new_driver()

    def form_driver(self):
        return self.driver

    async def close(self):
        self.closed = True


@pytest.fixture
def fake_driver():
    def factory(form, **options):
        return FakeFormDriver(form, **options)

    return factory


@pytest.fixture
def fake_session():
    def factory(form, **options):
        return FakeSession(form, **options)

    return factory
