"""
Batch processing router.

Endpoints:
  POST /processar: validate and process a direct-mail batch
                    (auth: X-Orchestrator-Secret)

Failures are returned as a BatchResponse body with sucesso=false:
  400  Erro de Validação: payload is missing required data
  500  Erro Interno: anything else (bad overrides, file failures)
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from maladireta.auth import verify_orchestrator_secret
from maladireta.config import get_settings
from maladireta.models.batch import (
    EXPECTED_PROCESSING_TYPE,
    STATUS_INTERNAL_ERROR,
    STATUS_SUCCESS,
    STATUS_VALIDATION_ERROR,
    BatchPayload,
    BatchResponse,
)
from maladireta.services.batch_processor import BatchProcessor
from maladireta.services.storage import SupabaseObjectStorage

logger = logging.getLogger(__name__)

router = APIRouter()


class PayloadValidationError(ValueError):
    """Raised when the batch payload is missing required data."""


def get_batch_processor() -> BatchProcessor:
    """Dependency: processor wired to Supabase Storage and env settings."""
    return BatchProcessor(SupabaseObjectStorage(), get_settings())


def validate_payload(payload: BatchPayload) -> None:
    """
    Check the fields every batch must carry.

    An unexpected tipoProcessamento is only logged.

    Raises:
        PayloadValidationError: On the first missing or invalid field
    """
    if payload.batch_id <= 0:
        raise PayloadValidationError("loteId must be greater than zero")
    if payload.customer is None:
        raise PayloadValidationError("cliente is required")
    if payload.profile is None:
        raise PayloadValidationError("perfilProcessamento is required")
    if not payload.files:
        raise PayloadValidationError("arquivosPcl must not be empty")
    if not payload.processing_type:
        raise PayloadValidationError("tipoProcessamento is required")

    if payload.processing_type != EXPECTED_PROCESSING_TYPE:
        logger.warning(
            f"Unexpected tipoProcessamento '{payload.processing_type}', "
            f"expected '{EXPECTED_PROCESSING_TYPE}'"
        )


def _error_response(status_code: int, payload: BatchPayload, status: str, message: str) -> JSONResponse:
    body = BatchResponse(
        batch_id=payload.batch_id,
        status=status,
        success=False,
        message=message,
        processed_at=datetime.now(timezone.utc),
        processing_type=payload.processing_type,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", by_alias=True))


@router.post(
    "/processar",
    response_model=BatchResponse,
    responses={
        400: {"model": BatchResponse, "description": "Payload validation failed"},
        401: {"description": "Missing or invalid orchestrator secret"},
        500: {"model": BatchResponse, "description": "Processing failed"},
    },
    dependencies=[Depends(verify_orchestrator_secret)],
)
def process_batch(
    payload: BatchPayload,
    processor: BatchProcessor = Depends(get_batch_processor),
):
    """
    Convert every data file of a direct-mail batch into a PCL job.

    Each file is downloaded from storage, converted and uploaded under
    processados/. Processing stops at the first failing file; files already
    converted stay uploaded but the batch is reported as failed.
    """
    logger.info(f"Received direct-mail batch {payload.batch_id}")

    try:
        validate_payload(payload)

        logger.info(
            f"Customer: {payload.customer.name} (ID: {payload.customer.id}); "
            f"profile: {payload.profile.name} (type: {payload.processing_type}); "
            f"files: {len(payload.files)}"
        )

        details = processor.process_batch(payload)
    except PayloadValidationError as e:
        logger.error(f"Batch {payload.batch_id} validation error: {e}")
        return _error_response(400, payload, STATUS_VALIDATION_ERROR, str(e))
    except Exception as e:
        logger.exception(f"Batch {payload.batch_id} failed: {e}")
        return _error_response(500, payload, STATUS_INTERNAL_ERROR, str(e))

    logger.info(f"Batch {payload.batch_id} processed successfully")

    return BatchResponse(
        batch_id=payload.batch_id,
        status=STATUS_SUCCESS,
        success=True,
        message="Batch processed successfully for direct-mail customer",
        processed_at=datetime.now(timezone.utc),
        details=details,
        processing_type=payload.processing_type,
        elapsed_seconds=details.elapsed_seconds,
        processed_files=details.processed_files,
        total_pages=details.total_pages,
    )
