"""
CLI main entry point.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from ..banks import ProfileLoadError
from ..config import Config, create_default_config, load_config
from ..pipeline import ParsingError, StatementParser
from ..schemas.parse_result import DocumentType, ParseRequest
from ..validation import validate_result

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def create_cli() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="statement-parser",
        description="Extract transactions, balances and account details from OCR text",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=Path("config.yaml"),
        help="Path to config file (default: config.yaml)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # parse command
    parse_parser = subparsers.add_parser("parse", help="Parse an OCR text file, print JSON")
    parse_parser.add_argument("file", type=Path, help="Text file with OCR output")
    parse_parser.add_argument(
        "--bank",
        type=str,
        help="Bank code or name (skips detection), e.g. TD, RBC",
    )
    parse_parser.add_argument(
        "--type",
        dest="document_type",
        choices=[t.value for t in DocumentType],
        help="Expected document type (skips classification)",
    )
    parse_parser.add_argument(
        "--strict",
        action="store_true",
        help="Only accept transaction lines that carry a date",
    )
    parse_parser.add_argument(
        "--include-raw-text",
        action="store_true",
        help="Include the input text in the output",
    )

    # validate command
    validate_parser = subparsers.add_parser(
        "validate", help="Validate a parse result JSON file (exit 1 if invalid)"
    )
    validate_parser.add_argument("file", type=Path, help="JSON output of the parse command")

    # init-config command
    subparsers.add_parser("init-config", help="Write a default config file to --config")

    return parser


def cmd_parse(
    config: Config,
    file: Path,
    bank: str | None = None,
    document_type: str | None = None,
    strict: bool = False,
    include_raw_text: bool = False,
) -> int:
    """Parse one OCR text file and print the result as JSON."""
    if not file.exists():
        print(f"❌ File not found: {file}", file=sys.stderr)
        return 1

    raw_text = file.read_text(encoding="utf-8", errors="replace")
    request = ParseRequest(
        raw_text=raw_text,
        expected_document_type=DocumentType(document_type) if document_type else None,
        bank_name_hint=bank,
        include_raw_text=include_raw_text,
        strict_mode=strict or config.extraction.strict_mode,
    )

    try:
        parser = StatementParser(config)
        result = parser.parse(request)
    except ProfileLoadError as e:
        print(f"❌ Failed to load bank profiles: {e}", file=sys.stderr)
        return 1
    except ParsingError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    print(json.dumps(result.to_dict(), indent=2))
    return 0


def cmd_validate(config: Config, file: Path) -> int:
    """Validate a stored parse result and print the report as JSON."""
    if not file.exists():
        print(f"❌ File not found: {file}", file=sys.stderr)
        return 1

    try:
        data = json.loads(file.read_text(encoding="utf-8"))
        report = validate_result(data, config.validation)
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        print(f"❌ Not a parse result: {e}", file=sys.stderr)
        return 1

    print(json.dumps(report.to_dict(), indent=2))
    return 0 if report.is_valid else 1


def cmd_init_config(config_path: Path) -> int:
    """Write the default configuration file."""
    if config_path.exists():
        print(f"⚠️  Config already exists: {config_path}")
        return 1

    create_default_config(config_path)
    print(f"✓ Wrote default config to {config_path}")
    return 0


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_cli()
    parsed = parser.parse_args(args)

    setup_logging(parsed.verbose)

    if not parsed.command:
        parser.print_help()
        return 1

    if parsed.command == "init-config":
        return cmd_init_config(parsed.config)

    # Load config
    try:
        config = load_config(parsed.config)
    except Exception as e:
        print(f"❌ Failed to load config: {e}", file=sys.stderr)
        return 1

    # Route to command
    if parsed.command == "parse":
        return cmd_parse(
            config,
            parsed.file,
            bank=parsed.bank,
            document_type=parsed.document_type,
            strict=parsed.strict,
            include_raw_text=parsed.include_raw_text,
        )
    elif parsed.command == "validate":
        return cmd_validate(config, parsed.file)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
