from .result_aggregator import ResultAggregator
from .run_executor import RunExecutor
from .test_runners import (BaseTestRunner, ConditionBranchRunner,
                           FormWalkRunner)

__all__ = [
    "BaseTestRunner",
    "ConditionBranchRunner",
    "FormWalkRunner",
    "ResultAggregator",
    "RunExecutor",
]
