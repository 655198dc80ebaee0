#!/usr/bin/env python3
"""
Rule-subset local search CLI (rulesearch)

Usage:
    rulesearch run --problem MODULE:FACTORY [--config PATH] [--strategy first|best]
                   [--runs N] [--pool-size N] [--seed N] [--csv PATH | --no-csv]
                   [--save PATH] [--quiet]
    rulesearch compare --problem MODULE:FACTORY [--config PATH]
    rulesearch config init PATH [--force]
    rulesearch config show PATH

A problem factory is any callable `factory(config) -> SearchProblem`.
"""

import json
import math
from dataclasses import fields, replace
from pathlib import Path
from typing import Optional

import typer
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from rulesearch.logger import create_logger
from rulesearch.progress import CsvProgressSink, LoggingProgressSink, ProgressSink
from rulesearch.search.comparison import compare_strategies
from rulesearch.search.config import SearchConfig
from rulesearch.search.enums import SearchStrategy
from rulesearch.search.errors import ProblemSetupError
from rulesearch.search.orchestrator import Orchestrator
from rulesearch.search.problem import ProblemFactory, load_problem_factory
from rulesearch.search.types import BatchResult

app = typer.Typer(
	name="rulesearch",
	help="Hill-climbing search over grammar rule subsets",
	no_args_is_help=True,
)
config_app = typer.Typer(help="Search config commands")
app.add_typer(config_app, name="config")

console = Console()


def format_score(score: float) -> str:
	return f"{score:.4f}" if math.isfinite(score) else str(score)


def load_config(path: Optional[str]) -> SearchConfig:
	if path is None:
		return SearchConfig.defaults()
	try:
		return SearchConfig.from_file(path)
	except (OSError, ValueError, TypeError) as e:
		rprint(f"[red]Error: could not load config {path}: {e}[/red]")
		raise typer.Exit(1)


def resolve_problem(spec: str) -> ProblemFactory:
	try:
		return load_problem_factory(spec)
	except (ImportError, AttributeError, ValueError) as e:
		rprint(f"[red]Error: could not load problem factory '{spec}': {e}[/red]")
		raise typer.Exit(1)


def batch_table(batch: BatchResult, title: str = "Runs") -> Table:
	"""Per-run summary, best run highlighted."""
	table = Table(title=title)
	table.add_column("Run", style="cyan", justify="right", width=4)
	table.add_column("Seed", justify="right")
	table.add_column("Steps", justify="right")
	table.add_column("Neighbors", justify="right")
	table.add_column("Size", justify="right")
	table.add_column("Bits/base", justify="right")
	table.add_column("Status", width=10)

	best_run = batch.best.stats.run_number if batch.best is not None else None
	rows = [(r.stats.run_number, r) for r in batch.results] + [(f.run_number, f) for f in batch.failures]
	for run_number, item in sorted(rows, key=lambda row: row[0]):
		if hasattr(item, "stats"):
			stats = item.stats
			status = "[green]best[/green]" if run_number == best_run else "ok"
			table.add_row(
				str(run_number), str(stats.seed), str(stats.steps_taken),
				str(stats.total_neighbors_evaluated), str(stats.best_size),
				format_score(stats.best_score), status,
			)
		else:
			table.add_row(str(run_number), str(item.seed), "-", "-", "-", "-", "[red]failed[/red]")
	return table


# =============================================================================
# Search commands
# =============================================================================

@app.command("run")
def run(
	problem: str = typer.Option(..., "--problem", "-p", help="Problem factory as module:attribute"),
	config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Config JSON file"),
	strategy: Optional[str] = typer.Option(None, "--strategy", "-s", help="first or best"),
	runs: Optional[int] = typer.Option(None, "--runs", "-n", help="Number of independent runs"),
	pool_size: Optional[int] = typer.Option(None, "--pool-size", help="Worker threads"),
	seed: Optional[int] = typer.Option(None, "--seed", help="Base seed"),
	csv_path: Optional[str] = typer.Option(None, "--csv", help="CSV output path (default: results/localsearch_<timestamp>.csv)"),
	no_csv: bool = typer.Option(False, "--no-csv", help="Do not write a CSV file"),
	save: Optional[str] = typer.Option(None, "--save", help="Write run stats as JSON"),
	quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print the summary table"),
):
	"""Run a multi-run local search and report the best grammar."""
	config = load_config(config_path)
	overrides = {}
	if strategy is not None:
		overrides["search_strategy"] = strategy
	if runs is not None:
		overrides["num_runs"] = runs
	if pool_size is not None:
		overrides["pool_size"] = pool_size
	if seed is not None:
		overrides["base_seed"] = seed
	try:
		config = replace(config, **overrides)
	except ValueError as e:
		rprint(f"[red]Error: {e}[/red]")
		raise typer.Exit(1)

	factory = resolve_problem(problem)
	logger = create_logger("localsearch", console=not quiet)

	sinks: list[ProgressSink] = [LoggingProgressSink(logger)]
	if not no_csv:
		csv_sink = CsvProgressSink(csv_path) if csv_path else CsvProgressSink.create()
		sinks.append(csv_sink)
		rprint(f"[dim]CSV: {csv_sink.path}[/dim]")

	logger.header(f"Local search: {config.num_runs} runs, {config.search_strategy.name}")
	orchestrator = Orchestrator(factory, config, sinks=sinks, logger=logger)
	try:
		batch = orchestrator.run()
	except ProblemSetupError as e:
		rprint(f"[red]Error: {e}[/red]")
		raise typer.Exit(1)
	except KeyboardInterrupt:
		orchestrator.cancel()
		rprint("[yellow]Interrupted[/yellow]")
		raise typer.Exit(130)
	finally:
		logger.close()

	console.print(batch_table(batch))
	if save:
		path = Path(save)
		path.parent.mkdir(parents=True, exist_ok=True)
		with open(path, "w") as f:
			json.dump({"config": config.serialize(), **batch.serialize()}, f, indent=2, default=str)
		rprint(f"[dim]Saved run stats to {path}[/dim]")

	if batch.best is None:
		rprint("[red]No run produced a result[/red]")
		raise typer.Exit(1)


@app.command("compare")
def compare(
	problem: str = typer.Option(..., "--problem", "-p", help="Problem factory as module:attribute"),
	config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Config JSON file"),
	quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print the comparison"),
):
	"""Run both acceptance strategies with the same seeds and compare."""
	config = load_config(config_path)
	factory = resolve_problem(problem)
	logger = create_logger("strategy_comparison", console=not quiet)
	try:
		comparison = compare_strategies(factory, config, sinks=[LoggingProgressSink(logger)], logger=logger)
	except ProblemSetupError as e:
		rprint(f"[red]Error: {e}[/red]")
		raise typer.Exit(1)
	finally:
		logger.close()

	console.print(batch_table(comparison.first, title=SearchStrategy.FIRST_IMPROVEMENT.name))
	console.print(batch_table(comparison.best, title=SearchStrategy.BEST_IMPROVEMENT.name))

	if comparison.winner is None:
		rprint("[red]Comparison incomplete: a strategy produced no successful run[/red]")
		raise typer.Exit(1)
	rprint(
		f"\n[bold]Winner:[/bold] [green]{comparison.winner}[/green] "
		f"(first={format_score(comparison.first_best.score)}, "
		f"best={format_score(comparison.best_best.score)}, delta={comparison.delta:+.6f})"
	)


# =============================================================================
# Config commands
# =============================================================================

@config_app.command("init")
def config_init(
	path: str = typer.Argument(..., help="Where to write the config"),
	force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
):
	"""Write the default config as JSON."""
	if Path(path).exists() and not force:
		rprint(f"[red]{path} exists (use --force to overwrite)[/red]")
		raise typer.Exit(1)
	SearchConfig.defaults().save(path)
	rprint(f"[green]✓[/green] Wrote default config to {path}")


@config_app.command("show")
def config_show(
	path: str = typer.Argument(..., help="Config JSON file"),
):
	"""Print a config, marking values that differ from the defaults."""
	config = load_config(path)
	defaults = SearchConfig.defaults()

	table = Table(title=path)
	table.add_column("Field", style="cyan")
	table.add_column("Value")
	table.add_column("Default", style="dim")
	for f in fields(SearchConfig):
		value = getattr(config, f.name)
		default = getattr(defaults, f.name)
		shown = value.name if isinstance(value, SearchStrategy) else str(value)
		default_shown = default.name if isinstance(default, SearchStrategy) else str(default)
		if value != default:
			shown = f"[yellow]{shown}[/yellow]"
		table.add_row(f.name, shown, default_shown)
	console.print(table)


def main():
	"""Entry point for the CLI."""
	app()


if __name__ == "__main__":
	main()
