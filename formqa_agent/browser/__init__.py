from .base import FormDriver
from .config import DEFAULT_CONFIG

__all__ = ["DEFAULT_CONFIG", "FormDriver"]
