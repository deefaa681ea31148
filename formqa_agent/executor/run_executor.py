import asyncio
import logging
from typing import Callable, Optional

from formqa_agent.browser.session import BrowserSession
from formqa_agent.conditions.graph import ConditionGraph
from formqa_agent.data import (FormDefinition, TestConfiguration, TestResult,
                               TestSession, TestStatus, TestType)
from formqa_agent.executor.result_aggregator import ResultAggregator
from formqa_agent.executor.test_runners import (ConditionBranchRunner,
                                                FormWalkRunner)
from formqa_agent.utils.log_icon import icon


class RunExecutor:
    """Runs a session's tests one after another, each in its own browser session."""

    def __init__(
        self,
        form: FormDefinition,
        base_url: str,
        session_factory: Optional[Callable[[TestConfiguration], object]] = None,
        timeout_ms: int = 30000,
    ):
        self.form = form
        self.base_url = base_url
        self.timeout_ms = timeout_ms
        self.session_factory = session_factory or self._browser_session
        self.graph = ConditionGraph(form)
        self.result_aggregator = ResultAggregator()
        self.test_runners = {
            TestType.FORM_WALK: FormWalkRunner(),
            TestType.CONDITION_BRANCH: ConditionBranchRunner(),
        }

    def _browser_session(self, test_config: TestConfiguration) -> BrowserSession:
        return BrowserSession(browser_config=test_config.browser_config, timeout_ms=self.timeout_ms)

    async def execute_tests(self, test_session: TestSession, report_dir: str | None = None) -> TestSession:
        """Run every enabled test and write the reports.

        On cancellation the tests not yet run are marked CANCELLED, a partial
        report is written and the cancellation propagates.
        """
        logging.info(f"Starting test execution for session: {test_session.session_id}")
        test_session.start_session()
        enabled_tests = test_session.get_enabled_tests()
        if not enabled_tests:
            logging.warning("No enabled tests found")

        try:
            for index, test_config in enumerate(enabled_tests, start=1):
                logging.info(f"Test {index}/{len(enabled_tests)}: {test_config.test_name}")
                result = await self._execute_single_test(test_config)
                test_session.update_test_result(test_config.test_id, result)
        except asyncio.CancelledError:
            logging.warning("Test execution cancelled, generating partial report.")
            for test_config in enabled_tests:
                if test_config.test_id not in test_session.test_results:
                    test_session.update_test_result(test_config.test_id, self._cancelled_result(test_config))
            test_session.complete_session()
            self._write_reports(test_session, report_dir)
            raise

        test_session.complete_session()
        self._write_reports(test_session, report_dir)
        logging.info(f"Test execution completed. Report: {test_session.report_path}")
        return test_session

    def _write_reports(self, test_session: TestSession, report_dir: str | None):
        try:
            test_session.aggregated_results = self.result_aggregator.aggregate_results(test_session)
            test_session.report_path = self.result_aggregator.generate_json_report(test_session, report_dir)
            test_session.html_report_path = self.result_aggregator.generate_html_report(test_session, report_dir)
        except Exception as e:
            logging.error(f"Failed to generate reports: {e}")

    def _cancelled_result(self, test_config: TestConfiguration) -> TestResult:
        return TestResult(
            test_id=test_config.test_id,
            test_type=test_config.test_type,
            test_name=test_config.test_name,
            status=TestStatus.CANCELLED,
            error_message="Test was cancelled",
        )

    async def _execute_single_test(self, test_config: TestConfiguration) -> TestResult:
        runner = self.test_runners.get(test_config.test_type)
        failed = TestResult(test_id=test_config.test_id, test_type=test_config.test_type, test_name=test_config.test_name)
        failed.start()
        if runner is None:
            failed.finish(TestStatus.FAILED, f"No runner available for test type: {test_config.test_type}")
            return failed

        session = self.session_factory(test_config)
        try:
            await session.initialize()
            result = await asyncio.wait_for(
                runner.run_test(session, test_config, self.form, self.base_url, self.graph),
                timeout=test_config.timeout,
            )
            mark = icon["success"] if result.status == TestStatus.PASSED else icon["failed"]
            logging.info(f"{mark} Test {test_config.test_name}: {result.status.value}")
            return result
        except asyncio.TimeoutError:
            message = f"Test timed out after {test_config.timeout}s"
            logging.error(f"{icon['failed']} {test_config.test_name}: {message}")
            failed.finish(TestStatus.FAILED, message)
            return failed
        except asyncio.CancelledError:
            logging.warning(f"Test cancelled: {test_config.test_name}")
            raise
        except Exception as e:
            message = f"Test execution failed: {e}"
            logging.error(f"{icon['failed']} {test_config.test_name}: {message}")
            failed.finish(TestStatus.FAILED, message)
            return failed
        finally:
            await session.close()
