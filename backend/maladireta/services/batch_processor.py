"""
Direct-mail batch processing.

For each data file of a batch: download it from storage, convert it to a PCL
job and upload the job next to the batch's other outputs.

Public API:
  BatchProcessor(storage, settings)
    .build_configuration(payload) -> PrintConfiguration
    .destination_key(batch_file) -> str
    .process_file(batch_file, config) -> ProcessedFile
    .process_batch(payload) -> ProcessingDetails
"""

import logging
import time
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import Any, Optional

from maladireta.config import Settings
from maladireta.models.batch import BatchFile, BatchPayload, ProcessedFile, ProcessingDetails
from maladireta.models.print_config import PrintConfiguration, SourceDescriptor
from maladireta.services.pcl_document import convert_records
from maladireta.services.storage import ObjectStorage

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ConfigurationError(ValueError):
    """Raised when a processamentoConfig override cannot be applied."""


class SourceNotFoundError(Exception):
    """Raised when a batch file is not present in storage."""


class FileProcessingError(Exception):
    """Raised when one file of a batch fails; wraps the original error."""

    def __init__(self, file_name: str):
        super().__init__(f"Failed to process file {file_name}")
        self.file_name = file_name


# ---------------------------------------------------------------------------
# Override parsing
# ---------------------------------------------------------------------------

# processamentoConfig key -> PrintConfiguration field
_STRING_OVERRIDES = {
    "FormatoImpressao": "paper_format",
    "TipoEnvelope": "envelope_type",
}
_BOOLEAN_OVERRIDES = {
    "EnderecoCompleto": "full_address",
    "CodigoPostal": "postal_code",
}


def _parse_bool(key: str, value: Any) -> bool:
    """
    Parse a boolean override. None means true; strings must read "true" or
    "false" (any case, surrounding spaces allowed).
    """
    if value is None:
        return True
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text == "true":
        return True
    if text == "false":
        return False
    raise ConfigurationError(f"Invalid boolean value for {key}: {value!r}")


def _base_name(file_name: str) -> str:
    """File name without directory or extension ("impressao.csv" -> "impressao")."""
    return PurePosixPath(file_name.replace("\\", "/")).stem


# ---------------------------------------------------------------------------
# Processor
# ---------------------------------------------------------------------------

class BatchProcessor:
    """
    Converts every file of a batch and stores the generated PCL jobs.

    Args:
        storage: Object storage holding source files and outputs.
        settings: Bucket and key prefixes to use.
    """

    def __init__(self, storage: ObjectStorage, settings: Settings):
        self.storage = storage
        self.settings = settings

    def build_configuration(self, payload: BatchPayload) -> PrintConfiguration:
        """
        Default direct-mail configuration with the payload's overrides applied.

        Overrides are parsed before any is applied, so a bad value leaves
        nothing half-configured. Unknown keys are ignored.

        Raises:
            ConfigurationError: If a boolean override is not "true"/"false"
        """
        logo = payload.profile.logo_path if payload.profile else None
        config = PrintConfiguration(company_logo=logo or "")

        overrides = payload.overrides or {}
        updates: dict[str, Any] = {}
        for key, field_name in _STRING_OVERRIDES.items():
            if key in overrides and overrides[key] is not None:
                updates[field_name] = str(overrides[key])
        for key, field_name in _BOOLEAN_OVERRIDES.items():
            if key in overrides:
                updates[field_name] = _parse_bool(key, overrides[key])

        return config.model_copy(update=updates)

    def destination_key(self, batch_file: BatchFile, now: Optional[datetime] = None) -> str:
        """
        Storage key for the generated PCL job.

        lotes/<guid>/impressao.csv -> processados/<guid>/impressao.pcl
        Any other layout falls back to
        processados/lote-<file batch id>/<name>_<YYYYMMDD-HHMMSS>.pcl
        """
        base = _base_name(batch_file.file_name)
        parts = batch_file.storage_key.split("/")
        if len(parts) >= 3 and parts[0] == self.settings.source_prefix:
            return f"{self.settings.output_prefix}/{parts[1]}/{base}.pcl"

        timestamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%d-%H%M%S")
        return f"{self.settings.output_prefix}/lote-{batch_file.batch_id}/{base}_{timestamp}.pcl"

    def process_file(self, batch_file: BatchFile, config: PrintConfiguration) -> ProcessedFile:
        """
        Download, convert and upload a single batch file.

        Raises:
            SourceNotFoundError: If the source key does not exist in storage
        """
        source = SourceDescriptor(
            file_name=batch_file.file_name,
            bucket=self.settings.storage_bucket,
            key=batch_file.storage_key,
        )

        if not self.storage.exists(source.bucket, source.key):
            raise SourceNotFoundError(f"Source file not found: {source.bucket}/{source.key}")

        data = self.storage.fetch(source.bucket, source.key)
        document = convert_records(data, source.file_name, config)

        key = self.destination_key(batch_file)
        location = self.storage.store(source.bucket, key, document, self.settings.pcl_content_type)
        logger.info(f"Stored PCL job {location} ({len(document)} bytes)")

        return ProcessedFile(
            file_name=f"{_base_name(batch_file.file_name)}.pcl",
            location=location,
            storage_key=key,
            size_bytes=len(document),
        )

    def process_batch(self, payload: BatchPayload) -> ProcessingDetails:
        """
        Process every file of the batch, in order.

        Stops at the first failing file. Files converted before the failure
        stay in storage.

        Raises:
            ConfigurationError: If the overrides are invalid
            FileProcessingError: If any file fails (original error chained)
        """
        started = time.perf_counter()
        logger.info(f"Processing direct-mail batch {payload.batch_id}")

        config = self.build_configuration(payload)
        logger.info(f"Configuration: format={config.paper_format}, envelope={config.envelope_type}")

        processed_files: list[str] = []
        stored_locations: list[str] = []
        total_pages = 0

        for batch_file in payload.files or []:
            logger.info(f"Processing file {batch_file.file_name} ({batch_file.page_count} pages)")
            try:
                result = self.process_file(batch_file, config)
            except Exception as e:
                logger.error(f"Failed to process file {batch_file.file_name}: {e}")
                raise FileProcessingError(batch_file.file_name) from e

            processed_files.append(batch_file.file_name)
            stored_locations.append(result.location)
            total_pages += batch_file.page_count

        elapsed = time.perf_counter() - started
        logger.info(
            f"Batch {payload.batch_id} done: {len(processed_files)} file(s), "
            f"{total_pages} page(s), {elapsed:.2f}s "
            f"(envelope={config.envelope_type}, full_address={config.full_address})"
        )

        return ProcessingDetails(
            elapsed_seconds=elapsed,
            processed_files=processed_files,
            stored_locations=stored_locations,
            total_pages=total_pages,
            configuration=config,
        )
