import json
from pathlib import Path

import click
import joblib

from wle_ml.common.config import PipelineSettings
from wle_ml.common.errors import PipelineError
from wle_ml.common.logging import setup_logger
from wle_ml.dataio.readers import load_dataset
from wle_ml.domain.exercise import SUBJECT_COLUMN
from wle_ml.evaluation.reports import render_markdown, write_reports
from wle_ml.pipeline import run_from_source
from wle_ml.preprocessing.reducer import feature_columns, reduce_columns
from wle_ml.subjects.splitter import split_by_subject


def _settings(config, **overrides) -> PipelineSettings:
    settings = PipelineSettings.from_yaml(config, **overrides)
    setup_logger("wle_ml", settings.log_level)
    return settings


@click.group()
@click.version_option(version="0.1.0")
def main():
    """Weight lifting exercise strategy comparison CLI"""
    pass


@main.command()
@click.option("--config", type=click.Path(exists=True), help="Config YAML path")
@click.option("--source", help="Registered source name or CSV path")
@click.option("--cache-dir", type=click.Path(), help="Raw data cache directory")
@click.option("--output-dir", type=click.Path(), help="Report output directory")
@click.option("--model-dir", type=click.Path(), help="Winner model output directory")
@click.option("--seed-train", type=int, help="Seed for the train/rest subject draw")
@click.option("--seed-test", type=int, help="Seed for the validation/test subject draw")
@click.option("--concurrency", type=int, help="Strategy pipelines trained in parallel")
def run(config, source, cache_dir, output_dir, model_dir, seed_train, seed_test, concurrency):
    """Compare all feature strategies and score the winner on the test subjects"""
    settings = _settings(
        config,
        source_name=source,
        cache_dir=cache_dir,
        output_dir=output_dir,
        model_dir=model_dir,
        split_seed_train=seed_train,
        split_seed_test=seed_test,
        concurrency=concurrency,
    )
    try:
        result = run_from_source(settings)
    except (PipelineError, FileNotFoundError) as e:
        raise click.ClickException(str(e))

    paths = write_reports(result, settings.output_dir)
    model_dir = Path(settings.model_dir)
    model_dir.mkdir(parents=True, exist_ok=True)
    model_path = model_dir / "winner.joblib"
    joblib.dump(result.winner.model, model_path)

    click.echo(f"Winner: {result.winner.strategy_name}")
    click.echo(f"Test error: {result.test_score.error_pct:.2f}%")
    for name, path in paths.items():
        click.echo(f"Saved {name} to: {path}")
    click.echo(f"Saved model to: {model_path}")


@main.command()
@click.option("--config", type=click.Path(exists=True), help="Config YAML path")
@click.option("--source", help="Registered source name or CSV path")
@click.option("--seed-train", type=int, help="Seed for the train/rest subject draw")
@click.option("--seed-test", type=int, help="Seed for the validation/test subject draw")
def split(config, source, seed_train, seed_test):
    """Show which subjects land in train, validation and test"""
    settings = _settings(config, source_name=source, split_seed_train=seed_train, split_seed_test=seed_test)
    try:
        reduced = reduce_columns(load_dataset(settings.source_name, settings.cache_dir))
        partition = split_by_subject(
            reduced, settings.split_seed_train, settings.split_seed_test, settings.n_train_subjects
        )
    except (PipelineError, FileNotFoundError) as e:
        raise click.ClickException(str(e))
    click.echo(json.dumps(partition.summary(), indent=2))


@main.command()
@click.option("--model-path", type=click.Path(exists=True), required=True, help="Saved winner model path")
@click.option("--source", default="pml-testing", help="Registered source name or CSV path")
@click.option("--cache-dir", type=click.Path(), default="data/raw", help="Raw data cache directory")
@click.option("--output-path", type=click.Path(), help="Predictions output path")
def infer(model_path, source, cache_dir, output_path):
    """Run inference with a saved winner model"""
    model = joblib.load(model_path)
    try:
        raw = load_dataset(source, cache_dir)
        reduced = reduce_columns(raw, require_label=False)
    except (PipelineError, FileNotFoundError) as e:
        raise click.ClickException(str(e))

    predictions = reduced[[SUBJECT_COLUMN]].copy()
    if "problem_id" in raw.columns:
        predictions.insert(0, "problem_id", raw["problem_id"])
    predictions["prediction"] = model.predict(reduced[feature_columns(reduced)])

    click.echo(f"Loaded {model.strategy_name} model from: {model_path}")
    if output_path:
        predictions.to_csv(output_path, index=False)
        click.echo(f"Saving predictions to: {output_path}")
    else:
        click.echo(predictions.to_string(index=False))


@main.command()
@click.option("--report-path", type=click.Path(exists=True), required=True, help="evaluation_report.json path")
@click.option("--output-path", type=click.Path(), help="Markdown output path")
def report(report_path, output_path):
    """Render a JSON evaluation report as Markdown"""
    with open(report_path) as f:
        markdown = render_markdown(json.load(f))
    if output_path:
        Path(output_path).write_text(markdown)
        click.echo(f"Report generated: {output_path}")
    else:
        click.echo(markdown)


if __name__ == "__main__":
    main()
