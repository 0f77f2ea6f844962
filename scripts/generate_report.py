#!/usr/bin/env python
import json
import sys

from wle_ml.evaluation.reports import render_markdown


def generate_markdown_report(report_path: str, output_path: str):
    with open(report_path) as f:
        report = json.load(f)

    with open(output_path, "w") as f:
        f.write(render_markdown(report))

    print(f"✓ Report generated: {output_path}")


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print("Usage: python generate_report.py <evaluation_report.json> <output.md>")
        sys.exit(1)

    generate_markdown_report(sys.argv[1], sys.argv[2])
