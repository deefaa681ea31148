from typing import Any, Protocol, runtime_checkable

from formqa_agent.controllers.base import Selector


@runtime_checkable
class FormDriver(Protocol):
    """What the traversal engine needs from a live form.

    Implemented on Playwright by ``PlaywrightFormDriver``; tests use an
    in-memory form runtime.
    """

    async def navigate(self, url: str) -> None: ...

    async def current_url(self) -> str: ...

    async def fill_field(self, selector: Selector, value: Any) -> bool: ...

    async def select_choice(self, selector: Selector, value: str, kind: str = "radio") -> bool: ...

    async def select_first(self, selector: Selector, kind: str = "radio") -> bool: ...

    async def check(self, selector: Selector) -> bool: ...

    async def upload_file(self, selector: Selector, file_name: str, mime_type: str) -> bool: ...

    async def click_button(self, name: str) -> bool: ...

    async def submit(self) -> bool: ...

    async def wait_for_ready(self) -> None: ...

    async def count_buttons(self, name: str) -> int: ...

    async def error_summary_count(self) -> int: ...
