"""Bulk CSV → SQL conversion for one-off loads outside the import service.

Reads a CSV (or Excel) export, maps its headers to database columns through
the alias table in aliases/headers.yaml, and writes a single multi-row
INSERT followed by verification queries. No validation or transformation is
applied; values are inserted as text.

Usage:
    eos-csv-to-sql data.csv scorecards
    eos-csv-to-sql data.csv rocks -o rocks.sql
"""

import argparse
import logging
import re
import sys
from pathlib import Path
from typing import Optional

import yaml

from eos_import.core.config import settings
from eos_import.core.errors import ParseError
from eos_import.core.file_parser import parse_file

logger = logging.getLogger(__name__)

ALIASES_FILE = "headers.yaml"
TABLE_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def load_aliases(aliases_path: Optional[Path] = None) -> dict[str, str]:
    """Load the header → column alias table.

    Looks for {aliases_dir}/headers.yaml; a missing file means no aliases.
    """
    if aliases_path is None:
        aliases_path = settings.resolve_path(settings.aliases_dir) / ALIASES_FILE

    if not aliases_path.exists():
        logger.warning(f"Alias table not found: {aliases_path}")
        return {}

    with open(aliases_path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Invalid alias table in {aliases_path}: expected a YAML mapping")

    return {str(k): str(v) for k, v in data.items()}


def column_name(header: str, aliases: dict[str, str]) -> str:
    if header in aliases:
        return aliases[header]
    return re.sub(r"\s+", "_", header.lower())


def sql_literal(value: Optional[str]) -> str:
    if value is None or value == "":
        return "NULL"
    return "'" + value.replace("'", "''") + "'"


def csv_to_sql(
    csv_path: Path,
    table: str,
    aliases: Optional[dict[str, str]] = None,
) -> str:
    """Render the rows of csv_path as an INSERT INTO public.{table} script."""
    if not TABLE_NAME_RE.match(table):
        raise ValueError(f"Invalid table name: '{table}'")
    if aliases is None:
        aliases = load_aliases()

    parsed = parse_file(Path(csv_path))
    if parsed.record_count == 0:
        raise ParseError("No data found in CSV file")

    columns = [column_name(h, aliases) for h in parsed.headers]
    logger.info(f"Converting {parsed.record_count} rows of {csv_path} into {table} ({', '.join(columns)})")

    value_rows = [
        "  (" + ", ".join(sql_literal(record.get(h)) for h in parsed.headers) + ")"
        for record in parsed.records
    ]

    lines = [
        f"-- Generated SQL for {table} from {Path(csv_path).name}",
        "",
        f"INSERT INTO public.{table} ({', '.join(columns)}) VALUES",
        ",\n".join(value_rows) + ";",
        "",
        "-- Verify the data was inserted",
        f"SELECT COUNT(*) AS inserted_rows FROM public.{table};",
        f"SELECT * FROM public.{table} ORDER BY created_at DESC LIMIT 5;",
    ]
    return "\n".join(lines) + "\n"


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Convert a CSV export into SQL INSERT statements.",
    )
    parser.add_argument("csv_file", type=Path, help="CSV or Excel file to convert")
    parser.add_argument("table", help="Target table name, e.g. scorecards")
    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Output file (default: <csv name>_<table>.sql in the current directory)",
    )
    parser.add_argument(
        "--aliases",
        type=Path,
        default=None,
        help="Alternative header alias YAML file",
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    args = _parse_args(argv)

    if not args.csv_file.exists():
        logger.error(f"File {args.csv_file} not found")
        return 1

    try:
        sql = csv_to_sql(args.csv_file, args.table, load_aliases(args.aliases))
    except (ParseError, ValueError) as e:
        logger.error(f"Conversion failed: {e}")
        return 1

    output = args.output or Path(f"{args.csv_file.stem}_{args.table}.sql")
    output.write_text(sql)
    logger.info(f"SQL written to {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
