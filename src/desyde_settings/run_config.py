"""Run-time view over settings and presolver output."""

from __future__ import annotations

from typing import Optional

from loguru import logger

from .config import Settings, StateError
from .models import OptCriterion, OutputPrintFrequency, PresolverResults, SearchType
from .reporting import render_settings

_OUT_FREQ_WORDS = {
    OutputPrintFrequency.ALL_SOL: "all solutions",
    OutputPrintFrequency.LAST: "last solution",
    OutputPrintFrequency.EVERY_n: "every n-th solution",
    OutputPrintFrequency.FIRSTandLAST: "first and last solution",
}

_SEARCH_WORDS = {
    SearchType.NONESEARCH: "none",
    SearchType.FIRST: "first solution",
    SearchType.ALL: "all solutions",
    SearchType.OPTIMIZE: "optimize",
    SearchType.OPTIMIZE_IT: "optimize iteratively",
    SearchType.GIST_ALL: "exhaustive search (all)",
    SearchType.GIST_OPT: "exhaustive search (optimize)",
}


class RunConfig:
    """Settings of one run plus the state that evolves while it executes.

    The only mutations are advancing the optimization step and attaching
    presolver results once; everything else is a query.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._presolver_results: Optional[PresolverResults] = None

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def step_count(self) -> int:
        return len(self._settings.criteria)

    @property
    def current_criterion(self) -> OptCriterion:
        return self.criterion_at(self._settings.optimization_step)

    def criterion_at(self, step: int) -> OptCriterion:
        """Criterion optimized at ``step``; ``NONE`` outside the schedule."""

        criteria = self._settings.criteria
        if 0 <= step < len(criteria):
            return criteria[step]
        return OptCriterion.NONE

    def do_optimize(self) -> bool:
        return self.current_criterion != OptCriterion.NONE

    def do_optimize_thput(self, step: Optional[int] = None) -> bool:
        target = self._settings.optimization_step if step is None else step
        return self.criterion_at(target) == OptCriterion.THROUGHPUT

    def do_optimize_power(self, step: Optional[int] = None) -> bool:
        target = self._settings.optimization_step if step is None else step
        return self.criterion_at(target) == OptCriterion.POWER

    def do_multi_step(self) -> bool:
        return len(self._settings.criteria) > 1

    def do_presolve(self) -> bool:
        return bool(self._settings.pre_models)

    def is_presolved(self) -> bool:
        return self._presolver_results is not None

    def inc_optimization_step(self) -> int:
        """Move to the next criterion and return the new step."""

        step = self._settings.optimization_step
        if step + 1 >= len(self._settings.criteria):
            raise StateError(
                f"Cannot advance optimization step past {step}: "
                f"{len(self._settings.criteria)} criteria configured"
            )
        self._settings = self._settings.copy(update={"optimization_step": step + 1})
        logger.info(
            "Optimization step {} -> {} ({})", step, step + 1, self.current_criterion.value
        )
        return step + 1

    def set_presolver_results(self, results: PresolverResults) -> None:
        if self._presolver_results is not None:
            raise StateError("Presolver results have already been attached")
        if not self.do_presolve():
            logger.warning("Presolver results attached although no presolver model is configured")
        self._presolver_results = results
        logger.debug(
            "Attached presolver results: {} mappings, {} results",
            len(results.one_proc_mappings),
            len(results.opt_results),
        )

    def get_presolver_results(self) -> Optional[PresolverResults]:
        return self._presolver_results

    def require_presolver_results(self) -> PresolverResults:
        if self._presolver_results is None:
            raise StateError("Presolver results requested before presolving completed")
        return self._presolver_results

    def get_out_freq(self) -> str:
        return _OUT_FREQ_WORDS[self._settings.out_print_freq]

    def get_search_type(self) -> str:
        return _SEARCH_WORDS[self._settings.search]

    def print_settings(self) -> str:
        return render_settings(self._settings)


__all__ = ["RunConfig"]
