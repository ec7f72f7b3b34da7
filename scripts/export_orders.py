"""Script to aggregate executive order sources and export the enriched batch.

Reads already-fetched orders (with their source rows) and writes the enriched
batch, a source-metadata summary and a search index.

Usage:
    python scripts/export_orders.py                                  # Config defaults
    python scripts/export_orders.py --input data/raw/orders.jsonl
    python scripts/export_orders.py --output-dir data/export --workers 4
    python scripts/export_orders.py --summary-format csv

Output:
    {output_dir}/executive_orders.json
    {output_dir}/processed_executive_orders.json
    {output_dir}/orders/{id}.json
    {output_dir}/sources.{format}
    {output_dir}/search_index.json
"""

import argparse
import sys
from datetime import datetime
from pathlib import Path

from src.export.exporter import OrderExporter
from src.export.loader import BatchLoader
from src.shared.config import Config


def main():
    parser = argparse.ArgumentParser(
        description="Aggregate executive order sources and export the enriched batch"
    )
    parser.add_argument(
        "--input",
        type=Path,
        default=Config.INPUT_FILE,
        help=f"Input .json or .jsonl batch (default: {Config.INPUT_FILE})",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Config.EXPORT_DIR,
        help=f"Directory for export artifacts (default: {Config.EXPORT_DIR})",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=Config.MAX_WORKERS,
        help="Worker threads for per-document aggregation",
    )
    parser.add_argument(
        "--summary-format",
        choices=["json", "csv", "parquet"],
        default=Config.SOURCE_SUMMARY_FORMAT,
        help="Format of the source-metadata summary",
    )
    args = parser.parse_args()

    Config.validate()

    log_file = Config.LOGS_DIR / "export" / f"export_{datetime.now():%Y%m%d_%H%M%S}.log"

    print("Executive Order Export")
    print(f"{'=' * 60}")
    print(f"Input:   {args.input}")
    print(f"Output:  {args.output_dir}")
    print(f"Workers: {args.workers}")
    print(f"Log:     {log_file}")
    print()

    loader = BatchLoader(log_file=log_file)
    exporter = OrderExporter(
        output_dir=args.output_dir,
        log_file=log_file,
        max_workers=args.workers,
        summary_format=args.summary_format,
        key_perspective_min_length=Config.KEY_PERSPECTIVE_MIN_LENGTH,
        key_perspective_teaser_length=Config.KEY_PERSPECTIVE_TEASER_LENGTH,
        fingerprint_width=Config.CONTENT_FINGERPRINT_WIDTH,
    )

    try:
        documents = loader.load(args.input)
        print(f"✓ Loaded {len(documents)} orders")
        print(f"  - With sources: {sum(1 for d in documents if d.sources)}")
        print()

        paths = exporter.export(documents)
        print(f"✓ Exported {len(paths)} artifacts:")
        for name, path in paths.items():
            print(f"  - {name}: {path}")
        print()

        print("✓ Export completed successfully")

    except (OSError, ValueError) as e:
        print(f"✗ Error during export: {e}")
        print(f"  Check log file for details: {log_file}")
        sys.exit(1)


if __name__ == "__main__":
    main()
