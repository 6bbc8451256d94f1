"""
Native Click implementation of the test command.

Usage: quickbuild test [options] [SCENARIO]
"""

from pathlib import Path

import click

from ...core.exceptions import (
    OperatorInterrupt,
    QuickbuildException,
    ScenarioAssertionFailed,
    ScenarioError,
)
from ...core.models.build import Artifact
from ...core.models.scenario import ScenarioReport
from ...presenters.scenario_report import ScenarioReportPresenter
from ...services.execution import ProcessSignalHandler
from ...services.quality.metrics import MetricsStore
from ...services.testing import DEFAULT_SCENARIO, IntegrationTestHarness, ScenarioCatalog
from ..context import QuickbuildContext
from ..decorators import build_options, handle_errors


def assertion_pass_rate(reports: list[ScenarioReport]) -> float:
    total = sum(r.total for r in reports)
    if total == 0:
        return 100.0 if all(r.passed for r in reports) else 0.0
    return sum(r.passed_count for r in reports) / total * 100


@click.command("test")
@click.argument("scenario", required=False, default=DEFAULT_SCENARIO)
@click.option(
    "--scenario-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="TOML file with additional [[scenario]] definitions",
)
@click.option("--list", "list_only", is_flag=True, help="List available scenarios and exit")
@build_options
@click.pass_obj
@handle_errors
def test_command(
    ctx: QuickbuildContext,
    scenario: str,
    scenario_file: Path | None,
    list_only: bool,
    **flags,
) -> None:
    """Run an integration test SCENARIO (default: signal-validation).

    Starts a data broker, a client and the application in an isolated
    container network, injects signals and checks the application log.
    Test containers and the network are always removed afterwards.

    \b
    Built-in scenarios:
        signal-validation   speed, temperature and fuel injections
        build-validation    build and verify the executable only
        full-suite          both of the above
    """
    presenter = ctx.presenter
    catalog = ScenarioCatalog()
    scenario_file = scenario_file or (
        Path(ctx.settings.testing.scenario_file) if ctx.settings.testing.scenario_file else None
    )
    if scenario_file is not None:
        catalog.load_file(scenario_file)

    if list_only:
        for name in catalog.names:
            presenter.print(f"{name:20} {catalog.get(name).description}")
        return

    scenarios = catalog.expand(scenario)
    config = ctx.pipeline_config(**flags)
    pipeline = ctx.build_pipeline(config)

    def build_artifact() -> Artifact:
        return pipeline.build().artifact

    reporter = ScenarioReportPresenter(presenter)
    harness = IntegrationTestHarness(
        config,
        build_fn=build_artifact,
        on_stage=reporter.show_stage,
        logger=ctx.logger,
    )

    with ProcessSignalHandler(logger=ctx.logger):
        reports = harness.run_suite(scenarios, on_report=reporter.show)

    try:
        MetricsStore(config.metrics_file).update(integration_test_pass_rate=assertion_pass_rate(reports))
    except (OSError, QuickbuildException) as e:
        ctx.logger.warning("Could not record test metrics: %s", e)

    if any(r.interrupted for r in reports):
        raise OperatorInterrupt("Scenario interrupted; test resources were torn down")

    failed = [r for r in reports if not r.passed]
    if not failed:
        presenter.print_success(f"{len(reports)} scenario(s) passed")
        return
    names = [r.scenario for r in failed]
    if all(r.error is None for r in failed):
        raise ScenarioAssertionFailed(
            f"{len(failed)} of {len(reports)} scenario(s) had failing assertions", failed=names
        )
    raise ScenarioError(
        f"{len(failed)} of {len(reports)} scenario(s) failed", context={"failed": names}
    )
