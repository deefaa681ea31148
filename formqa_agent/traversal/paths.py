import re
from typing import Optional
from urllib.parse import urlparse

from formqa_agent.data.form_structures import (REPEAT_PAGE_CONTROLLER,
                                               FormDefinition, Page)

# Repeat page instances append a UUID to the page path
UUID_PATTERN = re.compile(
    r"^(.+)/[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

# Repeat page summaries append /summary to the page path
REPEAT_SUMMARY_PATTERN = re.compile(r"^(.+)/summary$")

FORM_PREFIX = "/form"


def create_form_slug(name: str) -> str:
    """Lower-case the form name, drop parentheses and hyphenate whitespace."""
    return re.sub(r"\s+", "-", re.sub(r"[()]", "", name.lower()))


def build_form_url(base_url: str, form: FormDefinition, path: Optional[str] = None) -> str:
    """URL of `path` (the start page by default) within the form journey."""
    path = path if path is not None else form.start_page.path
    return f"{base_url.rstrip('/')}{FORM_PREFIX}/{form.slug}{path}"


def extract_path_from_url(url: str, slug: str) -> str:
    """Path within the form journey, "/" for the journey root.

    Paths outside the form prefix are returned unchanged.
    """
    pathname = urlparse(url).path
    prefix = f"{FORM_PREFIX}/{slug}"
    if pathname == prefix or pathname.startswith(prefix + "/"):
        return pathname[len(prefix):] or "/"
    return pathname


def is_repeat_page_instance(path: str) -> bool:
    return UUID_PATTERN.match(path) is not None


def find_page_by_path(form: FormDefinition, path: str) -> Optional[Page]:
    """Resolve a runtime path to its page definition.

    Tries an exact match, then the base of a repeat instance, then the base
    of a repeat summary.
    """
    page = form.page_by_path(path)
    if page is None:
        match = UUID_PATTERN.match(path)
        if match:
            page = form.page_by_path(match.group(1))
    if page is None:
        match = REPEAT_SUMMARY_PATTERN.match(path)
        if match:
            page = form.page_by_path(match.group(1))
    return page


def is_repeat_summary_path(form: FormDefinition, path: str) -> bool:
    match = REPEAT_SUMMARY_PATTERN.match(path)
    if not match:
        return False
    page = form.page_by_path(match.group(1))
    return page is not None and page.controller == REPEAT_PAGE_CONTROLLER


def summary_submit_button_text(page: Page) -> str:
    """Forms with a declaration (a Markdown block) on the summary say "Accept and send"."""
    if any(component.type == "Markdown" for component in page.components):
        return "Accept and send"
    return "Send"
