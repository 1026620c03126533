"""
Analyze a CSV file's headers and print the recommended agent field mapping.

Usage:
  PYTHONPATH=. python run_column_analysis.py \
    --input agents.csv \
    --sample-rows 5 \
    --strategy optimal
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from core.column_mapping import ColumnMappingError, ColumnMappingService
from core.config import get_config


def format_result(result) -> str:
    lines = [f"{'Column':<30} {'Field':<15} {'Conf':>6}  {'Strategy':<10} Mapped"]
    for column in result.detected_columns:
        lines.append(
            f"{column.column[:30]:<30} {column.field or '-':<15} {column.confidence:>6.2f}  "
            f"{column.strategy.value if column.strategy else '-':<10} {'yes' if column.mapped else 'no'}"
        )
    lines.append("")
    lines.append(f"Overall confidence: {result.confidence:.1%}")
    if result.missing_required_fields:
        lines.append(f"Missing required fields: {', '.join(result.missing_required_fields)}")
    return "\n".join(lines)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Recommend CSV column mappings for bulk agent import.")
    parser.add_argument("--input", required=True, help="Path to input CSV file")
    parser.add_argument("--sample-rows", type=int, default=None, help="Data rows sampled for tie-breaks")
    parser.add_argument("--strategy", choices=["greedy", "optimal"], default=None, help="Assignment strategy")
    parser.add_argument("--json", action="store_true", help="Print the full result as JSON")
    args = parser.parse_args(argv)

    config = get_config()
    logging.basicConfig(level=getattr(logging, config.log_level.upper(), logging.INFO))

    input_path = Path(args.input)
    if not input_path.exists():
        raise FileNotFoundError(f"Input file not found: {input_path}")

    if args.strategy:
        # Copy so the process-wide config keeps its own strategy
        mapping = config.mapping.model_copy(update={"assignment_strategy": args.strategy})
        config = config.model_copy(update={"mapping": mapping})
    service = ColumnMappingService.from_config(config)

    try:
        result = service.analyze_csv(input_path.read_bytes(), sample_rows=args.sample_rows)
    except ColumnMappingError as e:
        print(f"Analysis failed: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(format_result(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
