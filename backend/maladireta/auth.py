"""
Shared-secret authentication for calls from the central orchestrator.
"""

import logging
import os
from typing import Optional

from fastapi import Header, HTTPException

logger = logging.getLogger(__name__)


def _get_orchestrator_secret() -> str:
    return os.getenv("ORCHESTRATOR_SECRET", "")


def verify_orchestrator_secret(
    x_orchestrator_secret: Optional[str] = Header(None),
) -> None:
    """
    Check the X-Orchestrator-Secret header against ORCHESTRATOR_SECRET.

    Raises 401 if the secret is missing, unconfigured, or does not match.
    """
    expected = _get_orchestrator_secret()
    if not expected:
        logger.warning("ORCHESTRATOR_SECRET is not configured; all batch requests will be rejected")
        raise HTTPException(status_code=401, detail="Orchestrator secret not configured")

    if not x_orchestrator_secret or x_orchestrator_secret != expected:
        raise HTTPException(status_code=401, detail="Invalid orchestrator secret")
