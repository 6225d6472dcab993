"""Decide whether a statement file is CAMT.053 XML, MT940 or delimited text."""
from typing import Optional

from .base_parser import FileKind


def detect_file_kind(content: str, filename: Optional[str] = None) -> FileKind:
    """
    Classify a file from its name and content.

    XML wins over MT940, MT940 over CSV. Runs once per file before any
    parser is invoked.
    """
    lower_name = (filename or "").lower()

    if lower_name.endswith(".xml") or content.strip().startswith("<?xml") or "<Document" in content:
        return FileKind.CAMT053

    if (
        "mt940" in lower_name
        or lower_name.endswith(".sta")
        or (":20:" in content and ":61:" in content)
    ):
        return FileKind.MT940

    return FileKind.CSV
