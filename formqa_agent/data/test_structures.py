import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class TestType(str, Enum):
    FORM_WALK = "form_walk"
    CONDITION_BRANCH = "condition_branch"


class TestStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"
    WARNING = "warning"
    CANCELLED = "cancelled"


class SubTestStep(BaseModel):
    id: int
    description: str
    status: TestStatus = TestStatus.PASSED


class SubTestReport(BaseModel):
    title: str
    issues: str


class SubTestResult(BaseModel):
    """One walk within a test, e.g. the trigger run of a condition item."""

    name: str
    status: TestStatus = TestStatus.PENDING
    steps: List[SubTestStep] = Field(default_factory=list)
    report: List[SubTestReport] = Field(default_factory=list)
    metrics: Dict[str, Any] = Field(default_factory=dict)
    final_summary: str = ""


class TestConfiguration(BaseModel):
    test_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    test_type: TestType
    test_name: str
    enabled: bool = True
    browser_config: Dict[str, Any] = Field(default_factory=dict)
    test_specific_config: Dict[str, Any] = Field(default_factory=dict)
    # seconds
    timeout: int = 300


class TestResult(BaseModel):
    test_id: str
    test_type: TestType
    test_name: str
    status: TestStatus = TestStatus.PENDING
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration: Optional[float] = None
    sub_tests: List[SubTestResult] = Field(default_factory=list)
    error_message: str = ""
    metrics: Dict[str, Any] = Field(default_factory=dict)

    def start(self):
        self.status = TestStatus.RUNNING
        self.start_time = datetime.now()

    def finish(self, status: TestStatus, error_message: str = ""):
        self.status = status
        self.end_time = datetime.now()
        if self.start_time:
            self.duration = (self.end_time - self.start_time).total_seconds()
        if error_message:
            self.error_message = error_message


class TestSession(BaseModel):
    """All tests run against one form, with their results and report paths."""

    session_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    form_name: str
    target_url: str
    test_configurations: List[TestConfiguration] = Field(default_factory=list)
    test_results: Dict[str, TestResult] = Field(default_factory=dict)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    aggregated_results: Dict[str, Any] = Field(default_factory=dict)
    report_path: Optional[str] = None
    html_report_path: Optional[str] = None

    def add_test_configuration(self, test_config: TestConfiguration):
        self.test_configurations.append(test_config)

    def get_enabled_tests(self) -> List[TestConfiguration]:
        return [config for config in self.test_configurations if config.enabled]

    def start_session(self):
        self.start_time = datetime.now()

    def complete_session(self):
        self.end_time = datetime.now()

    def update_test_result(self, test_id: str, result: TestResult):
        self.test_results[test_id] = result

    def get_summary_stats(self) -> Dict[str, Any]:
        results = list(self.test_results.values())
        counts = {status.value: sum(1 for r in results if r.status == status) for status in TestStatus}
        duration = None
        if self.start_time and self.end_time:
            duration = (self.end_time - self.start_time).total_seconds()
        return {
            "form_name": self.form_name,
            "target_url": self.target_url,
            "total_tests": len(self.test_configurations),
            "executed_tests": len(results),
            "passed_tests": counts[TestStatus.PASSED.value],
            "failed_tests": counts[TestStatus.FAILED.value],
            "cancelled_tests": counts[TestStatus.CANCELLED.value],
            "total_sub_tests": sum(len(r.sub_tests) for r in results),
            "passed_sub_tests": sum(1 for r in results for s in r.sub_tests if s.status == TestStatus.PASSED),
            "duration": duration,
        }

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump(mode="json")
        data["summary"] = self.get_summary_stats()
        return data
