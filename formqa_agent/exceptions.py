class FormQAError(Exception):
    """Base class for every error raised by formqa_agent."""

    detail = "Form exploration error."

    def __init__(self, message: str = None):
        super().__init__(message or self.detail)


class ConfigurationError(FormQAError):
    """The form definition is inconsistent with itself; aborts the run."""

    detail = "Invalid form configuration."


class UnsupportedOperatorError(ConfigurationError):
    detail = "Condition operator is not supported."


class UnsupportedValueTypeError(ConfigurationError):
    detail = "Condition value type is not supported for this operator."


class UnknownDirectionError(ConfigurationError):
    detail = "Relative date direction must be 'in the past' or 'in the future'."


class InvalidDateError(ConfigurationError):
    detail = "Date value could not be parsed."


class ListNotFoundError(ConfigurationError):
    detail = "Referenced list does not exist."


class ListItemNotFoundError(ConfigurationError):
    detail = "Referenced list item does not exist."


class ComponentNotFoundError(ConfigurationError):
    detail = "Referenced component does not exist on any page."


class UnsupportedComponentError(ConfigurationError):
    detail = "Component type has no field controller."


class PageDefinitionError(ConfigurationError):
    detail = "Page definition is unusable."


class ListExhaustedError(FormQAError):
    """A list has no item able to play the requested role.

    Raised when e.g. a single-item list is asked for a non-trigger value
    under "is", which is different from the item not existing at all.
    """

    detail = "List has no other item to use."


class TraversalError(FormQAError):
    detail = "Form traversal failed."
