"""
Service settings.

Values come from environment variables (a local .env file is loaded first).
Storage bucket and key prefixes are passed to the services that need them
instead of being read from module-level constants.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Storage layout and output settings for one process."""

    storage_bucket: str = "grafica-mvp-storage"
    source_prefix: str = "lotes"
    output_prefix: str = "processados"
    pcl_content_type: str = "application/vnd.hp-pcl"


def get_settings() -> Settings:
    """Build Settings from the current environment."""
    return Settings(
        storage_bucket=os.getenv("STORAGE_BUCKET", "").strip() or Settings.storage_bucket,
        source_prefix=os.getenv("SOURCE_PREFIX", "").strip() or Settings.source_prefix,
        output_prefix=os.getenv("OUTPUT_PREFIX", "").strip() or Settings.output_prefix,
        pcl_content_type=os.getenv("PCL_CONTENT_TYPE", "").strip() or Settings.pcl_content_type,
    )
