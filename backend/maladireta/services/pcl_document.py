"""
PCL document generation for direct-mail envelopes.

Turns address records into a PCL job: a header (reset, A4 portrait, margins,
font), one page per record with the address block, and a footer with
provenance comments and a final form feed.

Public API:
  generate_header(config)                      -> bytes
  generate_footer(config, now=None)            -> bytes
  render_record(record, config)                -> str
  generate_pages(records, config)              -> bytes
  assemble(header, body, footer)               -> bytes
  convert_records(stream, filename, config)    -> bytes

All output is ASCII; characters outside ASCII (accented names, the footer's
"Configuração" label) are written as "?".
"""

import logging
from datetime import datetime, timezone
from typing import BinaryIO, Iterable, Mapping, Optional

from maladireta.models.print_config import PrintConfiguration
from maladireta.services import pcl
from maladireta.services.record_reader import read_records

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Layout constants
# ---------------------------------------------------------------------------

WINDOWED_ENVELOPE = "Janela"

# Fixed address-window anchor for windowed envelopes
WINDOW_VERTICAL = 2000
WINDOW_HORIZONTAL = 1200

LOGO_VERTICAL = 8000

# First line of every envelope sits this far below the top margin
FIRST_LINE_OFFSET = 10
LINE_HEIGHT = 20

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def _encode(text: str) -> bytes:
    return text.encode("ascii", errors="replace")


# ---------------------------------------------------------------------------
# Header / footer
# ---------------------------------------------------------------------------

def generate_header(config: PrintConfiguration) -> bytes:
    """
    Job setup: reset, orientation, page size, margins and font.

    Page geometry is always A4 portrait; config.paper_format is only echoed in
    the footer. Windowed envelopes also get the fixed address-window anchor.
    """
    parts = [
        pcl.reset(),
        pcl.set_orientation_portrait(),
        pcl.set_page_size_a4(),
        pcl.set_margins(config.margin_top, config.margin_left),
        pcl.set_font(),
    ]

    if config.envelope_type == WINDOWED_ENVELOPE:
        parts.append(pcl.move_cursor("V", WINDOW_VERTICAL))
        parts.append(pcl.move_cursor("H", WINDOW_HORIZONTAL))

    return _encode("".join(parts))


def generate_footer(config: PrintConfiguration, now: Optional[datetime] = None) -> bytes:
    """
    Provenance comments and the closing form feed.

    The company logo is referenced by path only; no image data is embedded.
    """
    processed_at = now or datetime.now(timezone.utc)
    parts = []

    if config.company_logo:
        parts.append(pcl.move_cursor("V", LOGO_VERTICAL))
        parts.append(pcl.comment(f"LOGOTIPO: {config.company_logo}"))

    parts.append("\n" + pcl.comment(f"Processado em: {processed_at.strftime(TIMESTAMP_FORMAT)} UTC"))
    parts.append("\n" + pcl.comment(f"Configuração: {config.paper_format} / {config.envelope_type}"))
    parts.append(pcl.form_feed())

    return _encode("".join(parts))


# ---------------------------------------------------------------------------
# Record layout
# ---------------------------------------------------------------------------

def _line_at(line: int, text: str) -> str:
    return pcl.move_cursor("V", line) + text + "\n"


def render_record(record: Mapping[str, str], config: PrintConfiguration) -> str:
    """
    Render the address block of one envelope.

    The vertical position starts at margin_top + 10 and moves down LINE_HEIGHT
    after each printed line. Inside the address block the cursor move for the
    street line is emitted even when "Endereco" is missing, but the position
    only advances for lines that were actually written. The CEP line is last
    and does not advance.
    """
    line = config.margin_top + FIRST_LINE_OFFSET

    name = record.get("Nome", record.get("Destinatario", ""))
    parts = [
        pcl.move_cursor("V", line),
        pcl.move_cursor("H", config.margin_left),
        f"{name}\n",
    ]
    line += LINE_HEIGHT

    if config.full_address:
        parts.append(pcl.move_cursor("V", line))
        if "Endereco" in record:
            parts.append(f"{record['Endereco']}\n")
            line += LINE_HEIGHT

        complement = record.get("Complemento")
        if complement:
            parts.append(_line_at(line, complement))
            line += LINE_HEIGHT

        if "Bairro" in record:
            parts.append(_line_at(line, record["Bairro"]))
            line += LINE_HEIGHT

        city = record.get("Cidade", "")
        state = record.get("Estado", record.get("UF", ""))
        parts.append(_line_at(line, f"{city} - {state}"))
        line += LINE_HEIGHT

    if config.postal_code and "CEP" in record:
        parts.append(_line_at(line, f"CEP: {record['CEP']}"))

    return "".join(parts)


def generate_pages(records: Iterable[Mapping[str, str]], config: PrintConfiguration) -> bytes:
    """One page per record, separated by form feeds (none after the last)."""
    pages = [render_record(record, config) for record in records]
    logger.info(f"Generated {len(pages)} envelope page(s)")
    return _encode(pcl.form_feed().join(pages))


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------

def assemble(header: bytes, body: bytes, footer: bytes) -> bytes:
    return header + body + footer


def convert_records(
    stream: BinaryIO,
    filename: str,
    config: PrintConfiguration,
    now: Optional[datetime] = None,
) -> bytes:
    """
    Convert a delimited data file into a complete PCL job.

    Args:
        stream: Source data file content.
        filename: Source file name (selects the delimiter).
        config: Layout configuration for the batch.
        now: Timestamp written to the footer (defaults to current UTC time).

    Returns:
        The PCL job bytes (header + pages + footer).
    """
    logger.info(f"Starting PCL generation for {filename}")

    try:
        header = generate_header(config)
        body = generate_pages(read_records(stream, filename), config)
        footer = generate_footer(config, now)
        document = assemble(header, body, footer)
    except Exception as e:
        logger.error(f"PCL generation failed for {filename}: {e}")
        raise

    logger.info(f"PCL generation finished for {filename}: {len(document)} bytes")
    return document
