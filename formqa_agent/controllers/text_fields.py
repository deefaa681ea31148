from formqa_agent.controllers.base import BaseFieldController, Selector


class TextFieldController(BaseFieldController):
    pass


class MultilineTextFieldController(BaseFieldController):
    pass


class EmailAddressFieldController(BaseFieldController):
    pass


class TelephoneNumberFieldController(BaseFieldController):
    pass


class OsGridRefFieldController(BaseFieldController):
    pass


class NationalGridFieldNumberController(BaseFieldController):
    pass


class NumberFieldController(BaseFieldController):
    def find(self) -> Selector:
        return Selector(role="textbox", name=self.title)

    def fill_actions(self, *values):
        if values and isinstance(values[0], float) and values[0].is_integer():
            values = (int(values[0]),) + values[1:]
        return super().fill_actions(*values)
