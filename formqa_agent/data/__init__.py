from .form_structures import (Component, Condition, ConditionItem,
                              FormDefinition, FormList, ListItem, Page,
                              RelativeDateValue)
from .test_structures import (SubTestReport, SubTestResult, SubTestStep,
                              TestConfiguration, TestResult, TestSession,
                              TestStatus, TestType)

__all__ = [
    "Component",
    "Condition",
    "ConditionItem",
    "FormDefinition",
    "FormList",
    "ListItem",
    "Page",
    "RelativeDateValue",
    "SubTestReport",
    "SubTestResult",
    "SubTestStep",
    "TestConfiguration",
    "TestResult",
    "TestSession",
    "TestStatus",
    "TestType",
]
