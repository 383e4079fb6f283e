"""CLI entrypoint for the co-evolution simulator."""

from pathlib import Path

import click

from coevolution import __version__
from coevolution.core.config import CoEvolutionConfig, load_config
from coevolution.core.exceptions import CoEvolutionError, ConfigurationError
from coevolution.ecosystem import Ecosystem
from coevolution.observability import configure_logging
from coevolution.scenarios import SCENARIOS, run_scenario


@click.group()
@click.version_option(__version__, prog_name="coevolution")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=False, file_okay=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML configuration file (defaults to ./coevolution.yaml if present)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Override the configured log level",
)
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Emit trace lines as JSON",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Path | None,
    log_level: str | None,
    output_json: bool,
) -> None:
    """coevolution - Simulate co-evolution in a model-driven ecosystem.

    Run one of the example ecosystems and watch a change cascade through
    meta-models, instances, generators and consumers.
    """
    ctx.ensure_object(dict)
    try:
        config = load_config(str(config_path) if config_path else None)
    except FileNotFoundError as exc:
        raise click.BadParameter(str(exc), param_hint="--config") from exc
    except ConfigurationError as exc:
        raise click.ClickException(exc.message) from exc

    overrides: dict[str, object] = {}
    if log_level:
        overrides["log_level"] = log_level.upper()
    if output_json:
        overrides["log_format"] = "json"
    ctx.obj["config"] = config.model_copy(update=overrides) if overrides else config


@cli.command("list")
def list_scenarios() -> None:
    """List the example scenarios."""
    for number, scenario in sorted(SCENARIOS.items()):
        click.echo(f"{number}: {scenario.description}")


@cli.command()
@click.argument("number", type=int)
@click.option(
    "--verbose",
    "-d",
    is_flag=True,
    help="Render artifacts with all relationship sets in trace lines",
)
@click.pass_context
def run(ctx: click.Context, number: int, verbose: bool) -> None:
    """Run scenario NUMBER on a fresh ecosystem."""
    if number not in SCENARIOS:
        raise click.BadParameter(
            f"No scenario {number}. Choose one of {sorted(SCENARIOS)}.",
            param_hint="NUMBER",
        )

    config: CoEvolutionConfig = ctx.obj["config"]
    if verbose:
        config = config.model_copy(update={"verbose": True})
    configure_logging(config)

    ecosystem = Ecosystem(config)
    click.echo(f"Executing scenario {number}: {SCENARIOS[number].description}")
    try:
        run_scenario(number, ecosystem)
    except CoEvolutionError as exc:
        click.echo(_summary(number, ecosystem))
        raise click.ClickException(f"{exc.error_code}: {exc.message}") from exc

    click.echo(_summary(number, ecosystem))


def _summary(number: int, ecosystem: Ecosystem) -> str:
    history = ecosystem.history()
    produced = sum(1 for record in history if record.produced_by is not None)
    return (
        f"Scenario {number}: {ecosystem.repository.count()} artifacts stored, "
        f"{produced} produced by transformations"
    )


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
