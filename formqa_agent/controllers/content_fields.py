import mimetypes
from typing import Any, Dict, List

from formqa_agent.controllers.base import (BaseFieldController, Selector,
                                           check_action, tap_action,
                                           upload_action)

UPLOAD_BUTTON = "Upload file"
DECLARATION_LABEL = "I understand and agree"


class MarkdownController(BaseFieldController):
    """Static content; nothing to answer."""

    def find(self) -> Selector:
        return Selector(css=f'[data-component-id="{self.id}"]')

    def fill_actions(self, *values) -> List[Dict[str, Any]]:
        return []

    def default_actions(self, field_data) -> List[Dict[str, Any]]:
        return []


class DeclarationFieldController(BaseFieldController):
    def find(self) -> Selector:
        return Selector(label=DECLARATION_LABEL)

    def fill_actions(self, *values) -> List[Dict[str, Any]]:
        return [check_action(self.find())]

    def default_actions(self, field_data) -> List[Dict[str, Any]]:
        return self.fill_actions()


class FileUploadFieldController(BaseFieldController):
    def find(self) -> Selector:
        return Selector(css=f'input[type="file"][id="{self.name}"]')

    @property
    def accepted_mime_type(self) -> str:
        accept = self.component.options.get("accept") or ""
        first = accept.split(",")[0].strip()
        return first or "text/plain"

    def upload_file_name(self) -> str:
        extension = mimetypes.guess_extension(self.accepted_mime_type) or ".txt"
        return f"test-file{extension}"

    def fill_actions(self, *values) -> List[Dict[str, Any]]:
        file_name = values[0] if values and values[0] else self.upload_file_name()
        return [
            upload_action(self.find(), file_name, self.accepted_mime_type),
            tap_action(UPLOAD_BUTTON),
        ]

    def default_actions(self, field_data) -> List[Dict[str, Any]]:
        # the name must match the accepted type, so generic data is not used here
        return self.fill_actions()
