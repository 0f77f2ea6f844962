import json
from pathlib import Path

import pandas as pd

COMPARISON_COLUMNS = [
    "strategy",
    "status",
    "error_pct",
    "train_seconds",
    "timing_basis",
    "n_features",
    "cv_error_pct",
    "reason",
]


def save_evaluation_report(metrics: dict, output_path: str | Path):
    with open(output_path, "w") as f:
        json.dump(metrics, f, indent=2, default=str)


def comparison_table(result) -> pd.DataFrame:
    """One row per strategy plus the final test row, in a stable column order."""
    rows = []
    for c in result.candidates:
        rows.append(
            {
                "strategy": c.strategy_name,
                "status": "degenerate" if c.score.degenerate else "ok",
                "error_pct": round(c.score.error_pct, 4),
                "train_seconds": round(c.score.training_seconds, 4),
                "timing_basis": c.model.timing_basis,
                "n_features": c.model.n_features,
                "cv_error_pct": round(100.0 * c.model.cv_error, 4),
                "reason": f"never predicts {c.score.missing_classes}" if c.score.degenerate else "",
            }
        )
    for f in result.failures:
        rows.append({"strategy": f.strategy, "status": "failed", "reason": f"{f.error_type}: {f.reason}"})

    winner = result.winner
    rows.append(
        {
            "strategy": f"final:{winner.strategy_name}",
            "status": "test",
            "error_pct": round(result.test_score.error_pct, 4),
            "train_seconds": round(result.test_score.training_seconds, 4),
            "timing_basis": winner.model.timing_basis,
            "n_features": winner.model.n_features,
            "cv_error_pct": round(100.0 * winner.model.cv_error, 4),
            "reason": "",
        }
    )
    return pd.DataFrame(rows, columns=COMPARISON_COLUMNS)


def build_report(result) -> dict:
    settings = result.settings.model_dump(mode="json") if result.settings is not None else {}
    return {
        "settings": settings,
        "timing_basis": result.timing_basis,
        "partition": {
            "assignment": dict(result.partition.assignment),
            **result.partition.summary(),
        },
        "strategies": {
            c.strategy_name: {
                **c.score.to_dict(),
                "cv_error_rate": c.model.cv_error,
                "n_features": c.model.n_features,
                "features": c.model.strategy.output_columns,
                "wall_seconds": c.model.wall_seconds,
                "cpu_seconds": c.model.cpu_seconds,
            }
            for c in result.candidates
        },
        "excluded": [
            {"strategy": c.strategy_name, "reason": f"degenerate: never predicts {c.score.missing_classes}"}
            for c in result.excluded_degenerate
        ]
        + [{"strategy": f.strategy, "reason": f"{f.error_type}: {f.reason}"} for f in result.failures],
        "winner": result.winner.strategy_name,
        "final": result.test_score.to_dict(),
    }


def write_reports(result, output_dir: str | Path) -> dict[str, Path]:
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    paths = {
        "comparison": output_dir / "strategy_comparison.csv",
        "report": output_dir / "evaluation_report.json",
    }
    comparison_table(result).to_csv(paths["comparison"], index=False)
    save_evaluation_report(build_report(result), paths["report"])
    return paths


def render_markdown(report: dict) -> str:
    lines = ["# Feature Strategy Comparison", ""]
    lines.append(f"Winner: **{report['winner']}** (timing basis: {report['timing_basis']})")
    lines.append("")

    lines += ["## Subjects", "", "| partition | subjects | rows |", "|---|---|---|"]
    for name in ("train", "validation", "test"):
        info = report["partition"][name]
        lines.append(f"| {name} | {', '.join(info['subjects'])} | {info['rows']} |")
    lines.append("")

    lines += ["## Validation", "", "| strategy | error % | seconds | features | degenerate |", "|---|---|---|---|---|"]
    for name, entry in report["strategies"].items():
        lines.append(
            f"| {name} | {entry['error_pct']:.2f} | {entry['training_seconds']:.2f} "
            f"| {entry['n_features']} | {entry['degenerate']} |"
        )
    lines.append("")

    if report["excluded"]:
        lines += ["## Excluded", ""]
        lines += [f"- **{e['strategy']}**: {e['reason']}" for e in report["excluded"]]
        lines.append("")

    final = report["final"]
    lines += ["## Test", "", f"- **error %**: {final['error_pct']:.2f}", f"- **rows**: {final['n_rows']}", ""]
    labels = final["confusion_matrix"]["labels"]
    lines.append("| predicted \\ true | " + " | ".join(labels) + " |")
    lines.append("|---" * (len(labels) + 1) + "|")
    for label, counts in zip(labels, final["confusion_matrix"]["counts"]):
        lines.append(f"| {label} | " + " | ".join(str(n) for n in counts) + " |")
    return "\n".join(lines) + "\n"
