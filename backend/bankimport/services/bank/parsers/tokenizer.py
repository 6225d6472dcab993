"""Line tokenizers for semicolon and comma delimited bank exports."""
from typing import List


def _strip_quotes(field: str) -> str:
    field = field.strip()
    if len(field) >= 2 and field[0] == '"' and field[-1] == '"':
        return field[1:-1].strip()
    return field


def split_semicolon_line(line: str) -> List[str]:
    """
    Split a semicolon delimited line.

    German bank exports never quote semicolons inside fields, so a plain
    split is enough; one layer of surrounding quotes is removed per field.
    """
    return [_strip_quotes(field) for field in line.split(";")]


def parse_csv_line(line: str) -> List[str]:
    """Parse a comma delimited line respecting quoted fields (commas inside quotes)."""
    result: List[str] = []
    current: List[str] = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            result.append("".join(current).strip())
            current = []
        else:
            current.append(char)

    result.append("".join(current).strip())
    return result


def tokenize(line: str, delimiter: str) -> List[str]:
    if delimiter == ";":
        return split_semicolon_line(line)
    return parse_csv_line(line)


def header_columns(line: str) -> List[str]:
    """Lower-cased, quote-stripped column names of a header line."""
    delimiter = ";" if ";" in line else ","
    return [column.replace('"', "").strip().lower() for column in tokenize(line, delimiter)]
