"""Command-line interface for rolling-bayes.

Provides ``train``, ``classify``, ``inspect`` and ``evaluate`` commands with
rich terminal output using the ``click`` and ``rich`` libraries.

Training data is plain text, one record per line: a category, a tab, then
the text to learn from.

Usage::

    rolling-bayes train reviews.tsv --model model.json
    rolling-bayes classify --model model.json "a great little phone"
    rolling-bayes inspect --model model.json
    rolling-bayes evaluate --memory-capacity 200 reviews.tsv
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import NoReturn, Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .classifier import NaiveBayesClassifier
from .config import Settings, load_settings
from .features import FeatureExtractor, read_labelled_text
from .metrics import EvaluationReport, evaluate_prequential
from .models import Classification

console = Console()
err_console = Console(stderr=True)

_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _fail(error: Exception) -> NoReturn:
    console.print(f"[bold red]Error:[/] {escape(str(error))}")
    sys.exit(1)


def _load_model(path: Path) -> NaiveBayesClassifier:
    try:
        return NaiveBayesClassifier.load(path)
    except (OSError, ValueError, KeyError, TypeError) as e:
        _fail(ValueError(f"Could not load model {path}: {e}"))


def _extractor_for(classifier: NaiveBayesClassifier) -> FeatureExtractor:
    return FeatureExtractor.from_dict(classifier.metadata.get("extractor", {}))


@click.group()
@click.version_option(package_name="rolling-bayes")
@click.option("--log-level", type=click.Choice(_LOG_LEVELS, case_sensitive=False), default=None,
              help="Logging level (default from ROLLING_BAYES_LOG_LEVEL).")
@click.option("--verbose", "-v", is_flag=True, help="Shortcut for --log-level DEBUG.")
@click.pass_context
def main(ctx: click.Context, log_level: Optional[str], verbose: bool) -> None:
    """Online naive Bayes classification with a bounded memory.

    Learn categories from labelled text, forget the oldest examples once
    the memory is full, and rank categories for new text.
    """
    try:
        settings = load_settings()
    except ValueError as e:
        _fail(e)
    if verbose:
        log_level = "DEBUG"
    _configure_logging(log_level or settings.log_level)
    ctx.obj = settings


@main.command()
@click.argument("data", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--model", "-m", type=click.Path(dir_okay=False, path_type=Path), required=True,
              help="Model file. Training resumes if it already exists.")
@click.option("--memory-capacity", "-c", type=click.IntRange(min=0), default=None,
              help="Number of training records to remember.")
@click.option("--ngram-max", type=click.IntRange(min=1), default=1,
              help="Longest word n-gram used as a feature (new models only).")
@click.option("--keep-stopwords", is_flag=True,
              help="Keep common English words as features (new models only).")
@click.pass_obj
def train(
    settings: Settings,
    data: Path,
    model: Path,
    memory_capacity: Optional[int],
    ngram_max: int,
    keep_stopwords: bool,
) -> None:
    """Learn labelled text lines (category<TAB>text) into a model.

    Example: rolling-bayes train reviews.tsv --model model.json
    """
    if model.exists():
        classifier = _load_model(model)
        if memory_capacity is not None:
            classifier.set_memory_capacity(memory_capacity)
    else:
        extractor = FeatureExtractor(ngram_range=(1, ngram_max), use_stopwords=not keep_stopwords)
        classifier = NaiveBayesClassifier(
            memory_capacity=memory_capacity if memory_capacity is not None else settings.memory_capacity,
            metadata={"extractor": extractor.to_dict()},
        )

    try:
        records = read_labelled_text(data, _extractor_for(classifier))
    except (OSError, ValueError) as e:
        _fail(e)

    with console.status("[bold blue]Learning...", spinner="dots"):
        for record in records:
            classifier.learn(record)

    try:
        classifier.save(model)
    except OSError as e:
        _fail(e)

    console.print(f"Learned [bold]{len(records)}[/] records from {escape(data.name)}")
    _render_model(classifier, model.name)


@main.command()
@click.argument("text")
@click.option("--model", "-m", type=click.Path(exists=True, dir_okay=False, path_type=Path), required=True,
              help="Model file created by 'train'.")
@click.option("--detailed", "-d", is_flag=True, help="Show the score of every category.")
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
def classify(text: str, model: Path, detailed: bool, output: str) -> None:
    """Rank the model's categories for TEXT.

    Example: rolling-bayes classify --model model.json "great battery life"
    """
    classifier = _load_model(model)
    features = _extractor_for(classifier).extract(text)
    ranking = list(reversed(classifier.classify_detailed(features)))
    best = ranking[0] if ranking else None

    if output == "json":
        payload: dict = {
            "category": best.category if best else None,
            "probability": best.probability if best else None,
        }
        if detailed:
            payload["ranking"] = [
                {"category": r.category, "probability": r.probability} for r in ranking
            ]
        click.echo(json.dumps(payload, indent=2))
        return

    if best is None:
        console.print("[yellow]The model has not learned any category yet.[/]")
        return

    console.print(f"Category: [bold green]{escape(str(best.category))}[/] "
                  f"(p = {best.probability:.4g})")
    if detailed:
        _render_ranking(ranking)


@main.command()
@click.option("--model", "-m", type=click.Path(exists=True, dir_okay=False, path_type=Path), required=True,
              help="Model file created by 'train'.")
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
def inspect(model: Path, output: str) -> None:
    """Show what a model currently remembers."""
    classifier = _load_model(model)

    if output == "json":
        snapshot = classifier.snapshot()
        click.echo(json.dumps({
            "memory_capacity": snapshot.memory_capacity,
            "memory_size": len(snapshot.memory),
            "feature_count": len(snapshot.total_feature_count),
            "categories": {
                str(category): {
                    "learned": count,
                    "distinct_features": len(snapshot.feature_count_per_category.get(category, {})),
                }
                for category, count in snapshot.total_category_count.items()
            },
        }, indent=2))
    else:
        _render_model(classifier, model.name)


@main.command()
@click.argument("data", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--memory-capacity", "-c", type=click.IntRange(min=0), default=None,
              help="Number of training records to remember.")
@click.option("--ngram-max", type=click.IntRange(min=1), default=1,
              help="Longest word n-gram used as a feature.")
@click.option("--keep-stopwords", is_flag=True, help="Keep common English words as features.")
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@click.pass_obj
def evaluate(
    settings: Settings,
    data: Path,
    memory_capacity: Optional[int],
    ngram_max: int,
    keep_stopwords: bool,
    output: str,
) -> None:
    """Test-then-train evaluation over labelled text lines.

    Every line is classified by the model trained on the lines before it,
    then learned.

    Example: rolling-bayes evaluate --memory-capacity 200 reviews.tsv
    """
    extractor = FeatureExtractor(ngram_range=(1, ngram_max), use_stopwords=not keep_stopwords)
    try:
        records = read_labelled_text(data, extractor)
    except (OSError, ValueError) as e:
        _fail(e)

    classifier = NaiveBayesClassifier(
        memory_capacity=memory_capacity if memory_capacity is not None else settings.memory_capacity,
    )
    with console.status("[bold blue]Evaluating...", spinner="dots"):
        report = evaluate_prequential(classifier, records)

    if output == "json":
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        _render_report(report, data.name)


# ------------------------------------------------------------------
# Rich rendering helpers
# ------------------------------------------------------------------

def _render_model(classifier: NaiveBayesClassifier, name: str) -> None:
    """Render the categories and memory usage of a model."""
    snapshot = classifier.snapshot()

    console.print(Panel(
        f"Memory: {len(snapshot.memory)} / {snapshot.memory_capacity} records | "
        f"Categories: {len(snapshot.total_category_count)} | "
        f"Features: {len(snapshot.total_feature_count)}",
        title=f"Model: {escape(name)}",
        border_style="blue",
    ))

    if not snapshot.total_category_count:
        return

    table = Table(title="Categories", show_lines=False)
    table.add_column("Category", style="cyan")
    table.add_column("Learned", justify="right")
    table.add_column("Distinct features", justify="right")
    for category, count in snapshot.total_category_count.items():
        table.add_row(
            escape(str(category)),
            str(count),
            str(len(snapshot.feature_count_per_category.get(category, {}))),
        )
    console.print(table)


def _render_ranking(ranking: list[Classification]) -> None:
    """Render ranked categories, best first, with their share of the total score."""
    total = sum(r.probability for r in ranking)
    table = Table(title="Ranking", show_lines=False)
    table.add_column("#", justify="right", width=4)
    table.add_column("Category", style="cyan")
    table.add_column("Probability", justify="right")
    table.add_column("Share", justify="right")
    for i, record in enumerate(ranking, 1):
        share = f"{record.probability / total:.1%}" if total > 0 else "-"
        table.add_row(str(i), escape(str(record.category)), f"{record.probability:.4g}", share)
    console.print(table)


def _render_report(report: EvaluationReport, name: str) -> None:
    console.print(Panel(
        f"Scored: {report.total} | Unscored: {report.unscored} | "
        f"Accuracy: {report.accuracy:.2%}",
        title=f"Prequential evaluation: {escape(name)}",
        border_style="blue",
    ))

    if not report.total:
        return

    table = Table(show_lines=False)
    table.add_column("Category", style="cyan")
    table.add_column("Support", justify="right")
    table.add_column("Predicted", justify="right")
    table.add_column("Precision", justify="right")
    table.add_column("Recall", justify="right")
    for category in report.categories:
        table.add_row(
            escape(str(category)),
            str(report.support(category)),
            str(report.predicted(category)),
            f"{report.precision(category):.4f}",
            f"{report.recall(category):.4f}",
        )
    console.print(table)


if __name__ == "__main__":
    main()
