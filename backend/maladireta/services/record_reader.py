"""
Delimited-record reader.

Reads the address data files uploaded with a batch (.csv, or tab/pipe
delimited .txt exports) and yields one record per data line.

Public API:
  read_records(stream, filename) -> Iterator[DelimitedRecord]
"""

import io
import logging
import re
from collections.abc import Iterator, Mapping
from typing import BinaryIO

logger = logging.getLogger(__name__)

# Anything that is not .csv may use either separator, even mixed in one file
_TEXT_DELIMITERS = re.compile(r"[\t|]")


class DelimitedRecord(Mapping[str, str]):
    """
    One data line keyed by header name.

    Lookups ignore case, so a "NOME" column satisfies record["Nome"]. Keys are
    only present for columns the line actually supplied.
    """

    def __init__(self, pairs: Mapping[str, str] | None = None):
        self._data: dict[str, tuple[str, str]] = {}
        for key, value in (pairs or {}).items():
            self._data[key.lower()] = (key, value)

    def __getitem__(self, key: str) -> str:
        return self._data[key.lower()][1]

    def __iter__(self):
        return (original for original, _ in self._data.values())

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._data

    def __repr__(self) -> str:
        return f"DelimitedRecord({dict(self.items())!r})"


def _get_extension(filename: str) -> str:
    """Return lower-case file extension including the dot."""
    dot = filename.rfind(".")
    if dot == -1:
        return ""
    return filename[dot:].lower()


def _splitter(filename: str):
    """Pick the line splitter for a file based on its extension."""
    if _get_extension(filename) == ".csv":
        # Quotes are literal characters
        return lambda line: line.split(",")
    return _TEXT_DELIMITERS.split


def read_records(stream: BinaryIO, filename: str) -> Iterator[DelimitedRecord]:
    """
    Yield one DelimitedRecord per data line of a delimited text stream.

    The first line is the header row. Field i of each data line is paired
    with header i; a short line just produces fewer keys and extra trailing
    fields are dropped. Header names and values are trimmed. A blank or
    missing first line yields nothing; blank data lines are skipped.

    Args:
        stream: Binary stream with UTF-8 text (a BOM is tolerated).
        filename: Original file name; ".csv" selects comma splitting,
            anything else splits on tab or "|".
    """
    split = _splitter(filename)
    # newline=None folds \r\n and bare \r into \n
    text = io.StringIO(stream.read().decode("utf-8-sig", errors="replace"), newline=None)

    header_line = text.readline().rstrip("\n")
    if not header_line.strip():
        logger.info(f"No header row found in {filename}; no records produced")
        return

    header = [name.strip() for name in split(header_line)]
    logger.debug(f"Header for {filename}: {header}")

    for raw_line in text:
        line = raw_line.rstrip("\n")
        if not line.strip():
            continue

        fields = split(line)
        yield DelimitedRecord(
            {header[i]: fields[i].strip() for i in range(min(len(header), len(fields)))}
        )
