"""Typer-based CLI for checking exploration run settings."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .builder import SettingsBuilder
from .config import ConfigError, RawOptions, SettingsBuildFailure, load_options, save_options
from .log_routing import LogRouter
from .models import enum_types
from .reporting import settings_table
from .run_config import RunConfig

app = typer.Typer(help="Validate the settings of a design-space exploration run.")
console = Console()


def _print_report_issues(failure: SettingsBuildFailure) -> None:
    for issue in failure.report.errors:
        console.print("[red]ERROR:[/red] " + escape(str(issue)))
    for issue in failure.report.warnings:
        console.print("[yellow]WARNING:[/yellow] " + escape(str(issue)))


@app.command()
def check(
    inputs: Optional[List[str]] = typer.Option(None, "--input", "-i", help="Input model file or directory"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Output directory"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Log file path"),
    log_level: Optional[List[str]] = typer.Option(None, "--log-level", help="Console level, then file level"),
    model: Optional[str] = typer.Option(None, "--model", help="CP model (NONE, SDF, SDF_PR_ONLINE)"),
    search: Optional[str] = typer.Option(None, "--search", help="Search type"),
    criteria: Optional[List[str]] = typer.Option(None, "--criteria", help="Optimization criterion, in order"),
    print_metrics: Optional[List[str]] = typer.Option(None, "--print-metrics", help="Metric to report"),
    th_prop: Optional[str] = typer.Option(None, "--th-prop", help="Throughput propagator (SSE, MCR)"),
    timeout: Optional[List[int]] = typer.Option(None, "--timeout", help="First, then all solutions timeout (ms)"),
    threads: Optional[int] = typer.Option(None, "--threads"),
    nogood: Optional[int] = typer.Option(None, "--nogood", help="No-good recording depth"),
    luby_scale: Optional[int] = typer.Option(None, "--luby-scale"),
    presolver_model: Optional[List[str]] = typer.Option(None, "--presolver-model"),
    presolver_heuristic: Optional[List[str]] = typer.Option(None, "--presolver-heuristic"),
    presolver_search: Optional[str] = typer.Option(None, "--presolver-search"),
    presolver_multistep_search: Optional[str] = typer.Option(None, "--presolver-multistep-search"),
    presolver_timeout: Optional[List[int]] = typer.Option(None, "--presolver-timeout"),
    out_file_type: Optional[str] = typer.Option(None, "--out-file-type"),
    out_print_freq: Optional[str] = typer.Option(None, "--out-print-freq"),
    tdn_config: Optional[str] = typer.Option(None, "--tdn-config", help="TDN configuration file"),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML option file"),
    dump_cfg: Optional[Path] = typer.Option(None, "--dump-cfg", help="Write the merged options as YAML"),
    table: bool = typer.Option(False, "--table/--no-table", help="Show settings as a table"),
    strict: bool = typer.Option(False, "--strict/--no-strict", help="Treat warnings as errors"),
) -> None:
    """Validate the given options and print the resulting settings."""

    cli_options = RawOptions(
        input=inputs or None,
        output=output,
        log_file=log_file,
        log_level=log_level or None,
        model=model,
        search=search,
        criteria=criteria or None,
        print_metrics=print_metrics or None,
        th_prop=th_prop,
        timeout=timeout or None,
        threads=threads,
        nogood=nogood,
        luby_scale=luby_scale,
        presolver_model=presolver_model or None,
        presolver_heuristic=presolver_heuristic or None,
        presolver_search=presolver_search,
        presolver_multistep_search=presolver_multistep_search,
        presolver_timeout=presolver_timeout or None,
        out_file_type=out_file_type,
        out_print_freq=out_print_freq,
        tdn_config=tdn_config,
    )

    router = LogRouter(console=Console(stderr=True))
    try:
        options = load_options(config).merged(cli_options) if config else cli_options
        if dump_cfg:
            save_options(options, dump_cfg)
        builder = SettingsBuilder(log_router=router)
        builder.apply_options(options)
        settings = builder.build()
    except SettingsBuildFailure as failure:
        _print_report_issues(failure)
        console.print("[red]Configuration error:[/red] no solver work started.")
        raise typer.Exit(code=4)
    except ConfigError as exc:
        console.print("[red]Configuration error:[/red] " + escape(str(exc)))
        raise typer.Exit(code=4)

    router.finalize(
        settings.log_level_console,
        settings.log_level_file,
        Path(settings.log_path) if settings.log_path else None,
    )
    try:
        run_config = RunConfig(settings)
        for issue in builder.report.warnings:
            console.print("[yellow]WARNING:[/yellow] " + escape(str(issue)))

        if table:
            console.print(settings_table(settings))
        else:
            typer.echo(run_config.print_settings(), nl=False)
        console.print(
            f"search: {run_config.get_search_type()}, output frequency: {run_config.get_out_freq()}, "
            f"multi-step: {run_config.do_multi_step()}, presolve: {run_config.do_presolve()}"
        )
    finally:
        router.close()

    if strict and builder.report.has_warnings:
        raise typer.Exit(code=2)


@app.command("init-config")
def init_config(path: Path = typer.Argument(..., writable=True, resolve_path=True)) -> None:
    """Write an example option file to PATH."""

    options = RawOptions(
        input=["sdfs/", "xmls/"],
        output="out/",
        log_level=["INFO", "DEBUG"],
        model="SDF",
        search="OPTIMIZE_IT",
        criteria=["THROUGHPUT", "POWER"],
        print_metrics=["THROUGHPUT", "POWER"],
        th_prop="SSE",
        timeout=[0, 0],
        threads=1,
        luby_scale=100,
        out_file_type="ALL_OUT",
        out_print_freq="ALL_SOL",
    )
    save_options(options, path)
    console.print(f"[green]Wrote option file to {escape(str(path))}[/green]")


@app.command()
def vocabulary() -> None:
    """List the accepted tokens of every enumerated option."""

    table = Table(title="Option vocabularies")
    table.add_column("Domain", style="cyan")
    table.add_column("Tokens")
    for enum_type in enum_types():
        table.add_row(enum_type.__name__, ", ".join(enum_type.tokens()))
    console.print(table)


if __name__ == "__main__":
    app()
