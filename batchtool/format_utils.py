"""
Output format utilities for batch-tool CLI commands.

Formats repository records as JSON, JSONL, YAML, CSV or TSV.
"""

import json
import csv
import io
import os
from typing import Dict, List, Any, Iterable, Iterator, Optional
import yaml

STRUCTURED_FORMATS = ('json', 'jsonl', 'csv', 'tsv', 'yaml')


def format_output(data: Iterable[Dict[str, Any]], format: str,
                  fields: Optional[List[str]] = None) -> Iterator[str]:
    """
    Format data according to the specified format.

    Args:
        data: Dictionaries to format
        format: Output format (json, jsonl, csv, tsv, yaml)
        fields: Optional list of fields to include (for CSV/TSV)

    Yields:
        Formatted strings for output
    """
    if format == "jsonl":
        yield from format_jsonl(data)
    elif format == "json":
        yield from format_json(data)
    elif format == "csv":
        yield from format_delimited(data, fields, ',')
    elif format == "tsv":
        yield from format_delimited(data, fields, '\t')
    elif format == "yaml":
        yield from format_yaml(data)
    else:
        raise ValueError(f"Unknown format: {format}")


def format_jsonl(data: Iterable[Dict[str, Any]]) -> Iterator[str]:
    """Format data as JSON Lines (one JSON object per line)."""
    for item in data:
        yield json.dumps(item, ensure_ascii=False)


def format_json(data: Iterable[Dict[str, Any]]) -> Iterator[str]:
    """Format data as a single JSON array."""
    yield json.dumps(list(data), ensure_ascii=False, indent=2)


def format_yaml(data: Iterable[Dict[str, Any]]) -> Iterator[str]:
    """Format data as YAML."""
    yield yaml.safe_dump(list(data), default_flow_style=False, allow_unicode=True, sort_keys=False)


def format_delimited(data: Iterable[Dict[str, Any]], fields: Optional[List[str]] = None,
                     delimiter: str = ',') -> Iterator[str]:
    """
    Format data as CSV (or TSV with a tab delimiter).

    Args:
        data: Dictionaries to format
        fields: Columns to include. If None, uses every field seen, sorted.
        delimiter: Column separator
    """
    rows = [flatten_dict(item) for item in data]
    if not rows:
        return

    if fields is None:
        all_fields: set[str] = set()
        for row in rows:
            all_fields.update(row.keys())
        fields = sorted(all_fields)

    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=fields, delimiter=delimiter, extrasaction='ignore')
    writer.writeheader()
    writer.writerows(rows)

    yield output.getvalue()


def flatten_dict(d: Dict[str, Any], parent_key: str = '', sep: str = '.') -> Dict[str, Any]:
    """
    Flatten a nested dictionary.

    Lists of scalars become comma-separated strings.

    Example:
        {'a': {'b': 1}, 'labels': ['x', 'y']} -> {'a.b': 1, 'labels': 'x, y'}
    """
    items: list[tuple[str, Any]] = []
    for k, v in d.items():
        new_key = f"{parent_key}{sep}{k}" if parent_key else k

        if isinstance(v, dict):
            items.extend(flatten_dict(v, new_key, sep=sep).items())
        elif isinstance(v, list):
            items.append((new_key, ', '.join(str(item) for item in v)))
        else:
            items.append((new_key, v))

    return dict(items)


def get_format_from_env(default: str = 'text') -> str:
    """
    Get output format from the BATCHTOOL_FORMAT environment variable.

    Args:
        default: Default format if not specified or unknown

    Returns:
        Format string
    """
    format = os.environ.get('BATCHTOOL_FORMAT', default).lower()
    if format not in STRUCTURED_FORMATS + ('text', 'table'):
        return default
    return format
