from __future__ import annotations

from datetime import timedelta

import pytest

from desyde_settings.builder import SettingsBuilder
from desyde_settings.config import StateError
from desyde_settings.models import OptCriterion, PresolverModel, PresolverResults, SearchType
from desyde_settings.run_config import RunConfig


@pytest.mark.parametrize(
    "criteria, optimize, multi_step",
    [
        ((), False, False),
        ((OptCriterion.NONE,), False, False),
        ((OptCriterion.LATENCY,), True, False),
        ((OptCriterion.THROUGHPUT, OptCriterion.POWER), True, True),
        ((OptCriterion.NONE, OptCriterion.POWER), False, True),
    ],
)
def test_optimize_and_multi_step(settings_factory, criteria, optimize, multi_step) -> None:
    run_config = RunConfig(settings_factory(criteria=criteria))
    assert run_config.do_optimize() is optimize
    assert run_config.do_multi_step() is multi_step


def test_step_queries_do_not_mutate(settings_factory) -> None:
    run_config = RunConfig(settings_factory(criteria=(OptCriterion.THROUGHPUT, OptCriterion.POWER)))
    assert run_config.do_optimize_power(1)
    assert not run_config.do_optimize_thput(1)
    assert run_config.criterion_at(5) is OptCriterion.NONE
    assert run_config.criterion_at(-1) is OptCriterion.NONE
    assert run_config.settings.optimization_step == 0
    assert run_config.do_optimize_thput()


def test_inc_optimization_step_visits_every_criterion(settings_factory) -> None:
    criteria = (OptCriterion.THROUGHPUT, OptCriterion.POWER, OptCriterion.LATENCY)
    run_config = RunConfig(settings_factory(criteria=criteria))
    visited = [run_config.current_criterion]
    for _ in range(len(criteria) - 1):
        run_config.inc_optimization_step()
        visited.append(run_config.current_criterion)
    assert visited == list(criteria)
    with pytest.raises(StateError):
        run_config.inc_optimization_step()
    assert run_config.settings.optimization_step == 2


def test_inc_optimization_step_keeps_other_settings(settings_factory) -> None:
    settings = settings_factory(criteria=(OptCriterion.THROUGHPUT, OptCriterion.POWER), threads=4)
    run_config = RunConfig(settings)
    assert run_config.inc_optimization_step() == 1
    advanced = run_config.settings
    assert advanced is not settings
    assert settings.optimization_step == 0
    assert advanced.dict(exclude={"optimization_step"}) == settings.dict(exclude={"optimization_step"})


def test_inc_optimization_step_without_criteria(settings_factory) -> None:
    run_config = RunConfig(settings_factory())
    with pytest.raises(StateError):
        run_config.inc_optimization_step()


def test_presolver_results_attach_once(settings_factory) -> None:
    run_config = RunConfig(settings_factory(pre_models=(PresolverModel.ONE_PROC_MAPPINGS,)))
    assert run_config.do_presolve()
    assert not run_config.is_presolved()
    assert run_config.get_presolver_results() is None
    with pytest.raises(StateError):
        run_config.require_presolver_results()

    results = PresolverResults(presolver_delay=timedelta(seconds=2))
    run_config.set_presolver_results(results)
    assert run_config.is_presolved()
    assert run_config.get_presolver_results() is results
    assert run_config.require_presolver_results() is results

    with pytest.raises(StateError):
        run_config.set_presolver_results(PresolverResults())
    assert run_config.get_presolver_results() is results


def test_descriptive_accessors(settings_factory) -> None:
    run_config = RunConfig(settings_factory(search=SearchType.GIST_OPT))
    assert run_config.get_search_type() == "exhaustive search (optimize)"
    assert run_config.get_out_freq() == "all solutions"
    assert not run_config.do_presolve()


def test_end_to_end_scenario(tmp_path) -> None:
    inputs = []
    for name in ("a.xml", "b.xml"):
        (tmp_path / name).write_text("<sdf/>")
        inputs.append(str(tmp_path / name))

    builder = SettingsBuilder()
    assert builder.set_input_paths(inputs) == []
    assert builder.set_model("SDF") == []
    assert builder.set_search("OPTIMIZE_IT") == []
    assert builder.set_criteria(["THROUGHPUT", "POWER"]) == []
    assert builder.set_timeout([1000, 5000]) == []
    run_config = RunConfig(builder.build())

    assert run_config.do_optimize()
    assert run_config.do_multi_step()
    assert run_config.do_optimize_thput()
    run_config.inc_optimization_step()
    assert run_config.do_optimize_power()
    assert run_config.settings.timeout_all == 5000
