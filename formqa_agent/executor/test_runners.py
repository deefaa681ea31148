import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from formqa_agent.conditions.graph import ConditionGraph
from formqa_agent.data import (FormDefinition, SubTestReport, SubTestResult,
                               SubTestStep, TestConfiguration, TestResult,
                               TestStatus)
from formqa_agent.traversal.engine import (CONDITION_CHECK, GAP, PAGE_VISIT,
                                           FormTraversalEngine,
                                           TraversalReport)
from formqa_agent.utils.log_icon import icon


def sub_test_from_report(name: str, report: TraversalReport) -> SubTestResult:
    """Translate a traversal report into a sub-test with one step per annotation."""
    sub = SubTestResult(name=name)
    for annotation in report.annotations:
        failed = annotation.type == GAP or (
            annotation.type == CONDITION_CHECK
            and any(c.path == annotation.path and not c.passed for c in report.condition_checks)
        )
        sub.steps.append(
            SubTestStep(
                id=len(sub.steps) + 1,
                description=f"[{annotation.type}] {annotation.description}",
                status=TestStatus.FAILED if failed else TestStatus.PASSED,
            )
        )
    for error in report.validation_errors:
        sub.report.append(SubTestReport(title=f"Validation error on {error['path']}", issues=error["message"]))
    for gap in report.gaps:
        sub.report.append(SubTestReport(title="Exploration gap", issues=gap))
    if report.error:
        sub.report.append(SubTestReport(title="Error", issues=report.error))

    sub.metrics = {
        "pages_visited": sum(1 for a in report.annotations if a.type == PAGE_VISIT),
        "condition_checks": len(report.condition_checks),
        "final_phase": report.final_phase.value,
    }
    if report.exhausted:
        sub.status = TestStatus.WARNING
    else:
        sub.status = TestStatus.PASSED if report.passed else TestStatus.FAILED
    sub.final_summary = (
        f"{name}: {sub.status.value}, visited {len(report.visited_paths)} paths, ended in {report.final_phase.value}"
    )
    return sub


def overall_status(sub_tests: List[SubTestResult]) -> TestStatus:
    if not sub_tests:
        return TestStatus.WARNING
    if any(sub.status == TestStatus.FAILED for sub in sub_tests):
        return TestStatus.FAILED
    if all(sub.status == TestStatus.PASSED for sub in sub_tests):
        return TestStatus.PASSED
    return TestStatus.WARNING


class BaseTestRunner(ABC):
    """Base class for test runners."""

    @abstractmethod
    async def run_test(
        self,
        session,
        test_config: TestConfiguration,
        form: FormDefinition,
        base_url: str,
        graph: Optional[ConditionGraph] = None,
    ) -> TestResult:
        """Run the test and return results."""
        pass

    def _new_result(self, test_config: TestConfiguration) -> TestResult:
        result = TestResult(
            test_id=test_config.test_id,
            test_type=test_config.test_type,
            test_name=test_config.test_name,
        )
        result.start()
        return result


class FormWalkRunner(BaseTestRunner):
    """Walks the whole form once with generic answers."""

    async def run_test(self, session, test_config, form, base_url, graph=None) -> TestResult:
        result = self._new_result(test_config)
        logging.info(f"{icon['running']} Running test: {test_config.test_name}")
        try:
            engine = FormTraversalEngine(
                form,
                session.form_driver(),
                base_url,
                graph=graph,
                field_data=test_config.test_specific_config.get("field_data"),
            )
            report = await engine.run()
            sub = sub_test_from_report("Form walk", report)
            result.sub_tests = [sub]
            result.metrics = {"visited_paths": report.visited_paths}
            result.finish(sub.status)
        except Exception as e:
            logging.error(f"{icon['failed']} Form walk failed: {e}")
            result.finish(TestStatus.FAILED, f"Form walk failed: {e}")
        return result


class ConditionBranchRunner(BaseTestRunner):
    """Forces every condition item both ways and checks where the form goes."""

    async def run_test(self, session, test_config, form, base_url, graph=None) -> TestResult:
        result = self._new_result(test_config)
        graph = graph or ConditionGraph(form)
        wanted = test_config.test_specific_config.get("conditions")
        condition_ids = wanted or [condition.id for condition in form.conditions]
        logging.info(f"{icon['running']} Running test: {test_config.test_name} over {len(condition_ids)} conditions")

        try:
            for gap in graph.gaps:
                if gap.condition_id in condition_ids:
                    result.sub_tests.append(
                        SubTestResult(
                            name=f"{gap.condition_id} / {gap.item_id or gap.component_id}",
                            status=TestStatus.FAILED,
                            report=[SubTestReport(title="Condition cannot be exercised", issues=gap.reason)],
                        )
                    )

            async def fresh_driver():
                await session.reset()
                return session.form_driver()

            engine = FormTraversalEngine(
                form,
                session.form_driver(),
                base_url,
                graph=graph,
                field_data=test_config.test_specific_config.get("field_data"),
            )
            for condition_id in condition_ids:
                if not graph.bindings_for_condition(condition_id):
                    continue
                try:
                    reports = await engine.exercise_condition(condition_id, reset=fresh_driver)
                except Exception as e:
                    logging.error(f"{icon['failed']} Condition '{condition_id}' could not be exercised: {e}")
                    result.sub_tests.append(
                        SubTestResult(
                            name=condition_id,
                            status=TestStatus.FAILED,
                            report=[SubTestReport(title="Error", issues=str(e))],
                        )
                    )
                    continue
                for report in reports:
                    binding = graph.binding(condition_id, report.target.item_id)
                    label = binding.item_id or binding.component_id
                    name = f"{binding.name} / {label} ({report.target.mode})"
                    result.sub_tests.append(sub_test_from_report(name, report))
            result.finish(overall_status(result.sub_tests))
        except Exception as e:
            logging.error(f"{icon['failed']} Condition branch test failed: {e}")
            result.finish(TestStatus.FAILED, f"Condition branch test failed: {e}")
        return result
