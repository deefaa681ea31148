from .action_executor import ActionExecutor

__all__ = ["ActionExecutor"]
