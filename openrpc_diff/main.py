"""
Command-line entry point: compare two OpenRPC documents.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from openrpc_diff import config
from openrpc_diff.errors import OpenRPCDiffError
from openrpc_diff.logging_config import setup_logging
from openrpc_diff.report_generator import ReportGenerator
from openrpc_diff.spec_comparator import SpecComparator
from openrpc_diff.spec_loader import SpecLoader

logger = logging.getLogger(__name__)


def load_env_file():
    """Load environment variables from .env file if it exists."""
    load_dotenv(override=False)  # Don't override existing env vars


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="openrpc-diff",
        description="Report which methods of two OpenRPC documents are compatible",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s old.json new.json                  # YAML summary on stdout
  %(prog)s old.json new.json --format text    # Indented text report
  %(prog)s old.json new.json --output diff.json --format json
        """,
    )
    parser.add_argument("left", help="Path to the old (left) OpenRPC document")
    parser.add_argument("right", help="Path to the new (right) OpenRPC document")
    parser.add_argument(
        "--format",
        choices=config.OUTPUT_FORMATS,
        default=None,
        help="Report format (default: yaml, or OPENRPC_DIFF_FORMAT)",
    )
    parser.add_argument("--output", help="Write the report to this file instead of stdout")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for openrpc-diff."""
    load_env_file()
    args = build_parser().parse_args(argv)

    if args.verbose:
        config.set_log_level("DEBUG")
    setup_logging(config.get_log_level())

    try:
        if args.format:
            config.set_output_format(args.format)
        output_format = config.get_output_format()
    except ValueError as e:
        logger.error(f"❌ {e}")
        print(f"error: {e}", file=sys.stderr)
        return 1

    try:
        loader = SpecLoader()
        left = loader.load(args.left, side="left")
        right = loader.load(args.right, side="right")
        logger.info(f"✅ Loaded {len(left.methods)} methods from {left.path}, {len(right.methods)} from {right.path}")

        summary = SpecComparator().compare_specs(left, right)
        logger.info(
            f"📊 {len(summary.equivalent)} equivalent, {len(summary.different)} different, "
            f"{len(summary.left)} only left, {len(summary.right)} only right"
        )

        report = ReportGenerator().render(summary, output_format)
    except OpenRPCDiffError as e:
        logger.error(f"❌ {e}")
        print(f"error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logger.info("🛑 Comparison interrupted by user")
        return 130

    if args.output:
        try:
            output_path = Path(args.output)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, "w", encoding="utf-8") as f:
                f.write(report)
        except OSError as e:
            logger.error(f"❌ Failed to save report: {e}")
            print(f"error: couldn't write {args.output}: {e}", file=sys.stderr)
            return 1
        logger.info(f"💾 Report saved: {output_path}")
    else:
        sys.stdout.write(report)

    return 0


if __name__ == "__main__":
    sys.exit(main())
