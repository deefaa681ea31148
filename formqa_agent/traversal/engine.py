"""Depth-first walk of a live form, discovering the page graph as it goes.

The engine never assumes which page comes next: it submits the current page,
reads where the form runtime sent it and pushes that URL onto a stack. A
visited set of form paths is the only cycle breaker. When a branch target is
given, the component a condition reads is answered with the synthesized
trigger (or non-trigger) value and the page landed on next is checked
against the condition.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from formqa_agent.actions.action_executor import ActionExecutor
from formqa_agent.conditions.graph import ConditionBinding, ConditionGraph
from formqa_agent.conditions.synthesizer import NON_TRIGGER, TRIGGER
from formqa_agent.controllers import ComponentsInitializer
from formqa_agent.controllers.base import SELECT_OPTION
from formqa_agent.data.form_structures import FormDefinition, Page
from formqa_agent.exceptions import (ConfigurationError, FormQAError,
                                     ListExhaustedError, TraversalError)
from formqa_agent.traversal.field_data import merge_field_data
from formqa_agent.traversal.paths import (build_form_url,
                                          extract_path_from_url,
                                          find_page_by_path,
                                          is_repeat_page_instance,
                                          is_repeat_summary_path,
                                          summary_submit_button_text)
from formqa_agent.traversal.state import RunPhase, TraversalState
from formqa_agent.utils.log_icon import icon

PAGE_VISIT = "page-visit"
CONDITION_CHECK = "condition-check"
INFO = "info"
GAP = "gap"

ADD_ANOTHER_BUTTON = "Add another"


@dataclass(frozen=True)
class BranchTarget:
    condition_id: str
    item_id: Optional[str] = None
    mode: str = TRIGGER

    def __post_init__(self):
        if self.mode not in (TRIGGER, NON_TRIGGER):
            raise ValueError(f"Unknown branch mode: {self.mode}")


@dataclass
class Annotation:
    type: str
    description: str
    path: Optional[str] = None


@dataclass
class ConditionCheck:
    condition_id: str
    condition_name: str
    item_id: Optional[str]
    mode: str
    path: str
    landed_condition: Optional[str]
    passed: bool


@dataclass
class TraversalReport:
    form_name: str
    target: Optional[BranchTarget] = None
    visited_paths: List[str] = field(default_factory=list)
    annotations: List[Annotation] = field(default_factory=list)
    condition_checks: List[ConditionCheck] = field(default_factory=list)
    gaps: List[str] = field(default_factory=list)
    validation_errors: List[Dict[str, Any]] = field(default_factory=list)
    final_phase: RunPhase = RunPhase.START
    forced_value: Any = None
    error: Optional[str] = None

    @property
    def completed(self) -> bool:
        return self.final_phase in (RunPhase.TERMINAL, RunPhase.SUMMARY_DONE)

    @property
    def exhausted(self) -> bool:
        """The target's list had no item for the requested role, so nothing was walked."""
        return self.target is not None and not self.visited_paths and bool(self.gaps)

    @property
    def passed(self) -> bool:
        if self.error or self.gaps or self.validation_errors:
            return False
        if any(not check.passed for check in self.condition_checks):
            return False
        if self.target is not None and not self.condition_checks:
            return False
        return self.completed

    def annotate(self, annotation_type: str, description: str, path: Optional[str] = None):
        self.annotations.append(Annotation(annotation_type, description, path))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "form_name": self.form_name,
            "target": vars(self.target) if self.target else None,
            "visited_paths": list(self.visited_paths),
            "annotations": [vars(a) for a in self.annotations],
            "condition_checks": [vars(c) for c in self.condition_checks],
            "gaps": list(self.gaps),
            "validation_errors": list(self.validation_errors),
            "final_phase": self.final_phase.value,
            "forced_value": repr(self.forced_value) if self.forced_value is not None else None,
            "error": self.error,
            "passed": self.passed,
        }


class FormTraversalEngine:
    def __init__(
        self,
        form: FormDefinition,
        driver,
        base_url: str,
        graph: Optional[ConditionGraph] = None,
        field_data: Optional[Dict[str, list]] = None,
    ):
        self.form = form
        self.driver = driver
        self.base_url = base_url
        self.graph = graph or ConditionGraph(form)
        self.field_data = merge_field_data(field_data)
        self.executor = ActionExecutor(driver)

    def _resolve_target(self, target: BranchTarget) -> ConditionBinding:
        binding = self.graph.binding(target.condition_id, target.item_id)
        if binding is None:
            raise ConfigurationError(
                f"Condition '{target.condition_id}' item {target.item_id or '<first>'} has no usable binding"
            )
        return binding

    async def run(self, target: Optional[BranchTarget] = None) -> TraversalReport:
        """Walk the form once from its first page.

        Args:
            target: Condition item to force; None for a plain walk with generic data.

        Returns:
            TraversalReport: What was visited, checked and found missing.

        Raises:
            ConfigurationError: The target cannot be bound or a page is unusable.
            TraversalError: The driver could not submit a page.
        """
        state = TraversalState()
        report = TraversalReport(form_name=self.form.name, target=target)

        binding = None
        forced_value = None
        if target is not None:
            binding = self._resolve_target(target)
            try:
                forced_value = binding.values.require(target.mode)
            except ListExhaustedError as e:
                logging.warning(f"{icon['skip']} Condition '{binding.name}': {e}")
                report.gaps.append(str(e))
                report.annotate(GAP, str(e))
                report.final_phase = RunPhase.ABORTED
                return report
            report.forced_value = forced_value
            logging.info(
                f"{icon['condition']} Forcing condition '{binding.name}' ({target.mode}) "
                f"on component '{binding.component_id}' with {forced_value!r}"
            )

        start_url = build_form_url(self.base_url, self.form)
        await self.driver.navigate(start_url)
        state.push(start_url)
        slug = self.form.slug

        while state.has_pending():
            current_url = state.pop()
            current_path = extract_path_from_url(current_url, slug)

            if state.is_visited(current_path):
                logging.debug(f"Already visited {current_path}, skipping")
                continue
            state.mark_visited(current_path)
            state.phase = RunPhase.VISITING
            report.visited_paths.append(current_path)

            page = find_page_by_path(self.form, current_path)

            if state.pending_condition is not None:
                self._check_branch(target, binding, page, current_path, report)
                state.pending_condition = None

            if page is None:
                message = f"No page definition found for path: {current_path}"
                logging.warning(f"{icon['warning']} {message}")
                report.gaps.append(current_path)
                report.annotate(GAP, message, current_path)
                state.phase = RunPhase.ABORTED
                break

            logging.info(f"{icon['page']} Processing page: {page.label} ({current_path})")
            report.annotate(PAGE_VISIT, f"Page: {page.label} ({current_path})", current_path)

            if page.is_terminal:
                await self._finish_terminal(page, current_path, report)
                state.phase = RunPhase.TERMINAL
                break

            if page.is_summary:
                button = summary_submit_button_text(page)
                state.phase = RunPhase.SUBMITTING
                if not await self.driver.click_button(button):
                    raise TraversalError(f"Could not press '{button}' on summary page {current_path}")
                report.annotate(INFO, f"Submitted form from summary page with '{button}'", current_path)
                logging.info(f"{icon['success']} Submitted '{self.form.name}' from {current_path}")
                state.phase = RunPhase.SUMMARY_DONE
                break

            if await self._is_repeat_summary(current_path):
                logging.info(f"{icon['repeat']} Repeat summary at {current_path}, continuing past the group")
                report.annotate(INFO, f"Continued past repeat summary {current_path}", current_path)
                await self._submit_and_follow(state, current_path, report)
                continue

            state.phase = RunPhase.FILLING
            forced_here = await self._fill_page(page, binding, forced_value)
            if forced_here:
                state.pending_condition = binding.condition_id

            state.phase = RunPhase.SUBMITTING
            await self._submit_and_follow(state, current_path, report)
        else:
            logging.warning(f"{icon['warning']} Ran out of pages before reaching the end of '{self.form.name}'")
            report.annotate(INFO, "Exploration ended before a terminal or summary page")
            state.phase = RunPhase.EXHAUSTED

        if target is not None and not report.condition_checks and state.phase != RunPhase.ABORTED:
            message = f"Component '{binding.component_id}' for condition '{binding.name}' was never reached"
            logging.warning(f"{icon['warning']} {message}")
            report.annotate(GAP, message)

        report.final_phase = state.phase
        return report

    async def _is_repeat_summary(self, path: str) -> bool:
        if is_repeat_summary_path(self.form, path):
            return True
        if is_repeat_page_instance(path):
            return False
        return await self.driver.count_buttons(ADD_ANOTHER_BUTTON) > 0

    async def _finish_terminal(self, page: Page, path: str, report: TraversalReport):
        report.annotate(INFO, f"Reached terminal page: {page.label}", path)
        logging.info(f"{icon['terminal']} Reached terminal page: {page.label}")
        if await self.driver.count_buttons("Continue") > 0:
            message = f"Terminal page {path} still offers Continue"
            logging.warning(f"{icon['warning']} {message}")
            report.validation_errors.append({"path": path, "count": 1, "message": message})

    async def _fill_page(self, page: Page, binding: Optional[ConditionBinding], forced_value) -> bool:
        """Answer every component on `page`; True when the forced component was among them."""
        controllers = ComponentsInitializer.initialize_page(page, self.graph)
        forced_here = False
        for controller in controllers:
            value = None
            key = controller.id or controller.name
            if binding is not None and key == binding.component_id:
                value = forced_value
                forced_here = True
                logging.debug(f"Answering {controller!r} with forced value {value!r}")
            actions = controller.actions_for(value, self.field_data)
            results = await self.executor.execute_all(actions)
            failed = next((r for r in results if not r.get("success")), None)
            if failed is None:
                continue
            logging.warning(f"{icon['warning']} {controller!r} on {page.path}: {failed.get('message')}")
            if value is None and actions[len(results) - 1]["type"] == SELECT_OPTION:
                logging.info(f"{icon['skip']} No option matched for {controller!r}, selecting the first one")
                for result in await self.executor.execute_all(controller.fallback_actions()):
                    if not result.get("success"):
                        logging.warning(f"{icon['warning']} {controller!r} on {page.path}: {result.get('message')}")
        return forced_here

    async def _submit_and_follow(self, state: TraversalState, current_path: str, report: TraversalReport):
        if not await self.driver.submit():
            raise TraversalError(f"Could not submit page {current_path}")
        await self.driver.wait_for_ready()

        errors = await self.driver.error_summary_count()
        if errors:
            logging.warning(f"{icon['failed']} {errors} validation error summary on {current_path}")
            report.validation_errors.append({"path": current_path, "count": errors, "message": "There is a problem"})

        new_url = await self.driver.current_url()
        new_path = extract_path_from_url(new_url, self.form.slug)
        if new_path != current_path:
            state.push(new_url)
            logging.debug(f"Navigated to: {new_path} from {current_path}")

    def _check_branch(
        self,
        target: BranchTarget,
        binding: ConditionBinding,
        page: Optional[Page],
        path: str,
        report: TraversalReport,
    ):
        landed = page.condition if page is not None else None
        matched = landed == target.condition_id
        passed = matched if target.mode == TRIGGER else not matched
        report.condition_checks.append(
            ConditionCheck(
                condition_id=target.condition_id,
                condition_name=binding.name,
                item_id=binding.item_id,
                mode=target.mode,
                path=path,
                landed_condition=landed,
                passed=passed,
            )
        )
        outcome = "correctly triggered" if matched else "NOT triggered"
        mark = icon["success"] if passed else icon["failed"]
        description = f'Condition "{binding.name}" {outcome} ({target.mode}) -> navigated to {path}'
        report.annotate(CONDITION_CHECK, description, path)
        log = logging.info if passed else logging.warning
        log(f"{mark} {description}")

    def use_driver(self, driver):
        self.driver = driver
        self.executor = ActionExecutor(driver)

    async def exercise_condition(
        self,
        condition_id: str,
        reset: Optional[Callable[[], Awaitable[Any]]] = None,
    ) -> List[TraversalReport]:
        """Trigger and non-trigger walks for every bound item of a condition.

        Args:
            condition_id: Condition to exercise.
            reset: Coroutine function returning a driver on a new form session.
                Awaited before each walk so no answers carry over.

        Returns:
            List[TraversalReport]: One report per walk. A walk that hits a fatal
            error is aborted on its own and carries the message in ``error``.
        """
        bindings = self.graph.bindings_for_condition(condition_id)
        if not bindings:
            raise ConfigurationError(f"Condition '{condition_id}' has no usable items")
        reports = []
        for binding in bindings:
            for mode in (TRIGGER, NON_TRIGGER):
                target = BranchTarget(condition_id=condition_id, item_id=binding.item_id, mode=mode)
                if reset is not None:
                    self.use_driver(await reset())
                try:
                    reports.append(await self.run(target))
                except FormQAError as e:
                    logging.error(f"{icon['failed']} Walk for '{binding.name}' ({mode}) aborted: {e}")
                    reports.append(
                        TraversalReport(
                            form_name=self.form.name,
                            target=target,
                            final_phase=RunPhase.ABORTED,
                            error=str(e),
                        )
                    )
        return reports
