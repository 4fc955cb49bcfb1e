"""Preparation of the CMS import spec from ``crystallize-import.json``.

The upload itself is done with the CMS's own CLI; this module only checks the
credentials and writes the spec file that CLI consumes.
"""

import json
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from dotenv import load_dotenv

from heatshop.config import CMS_SPEC_PATH, IMPORT_PATH
from heatshop.logging_config import get_logger

__all__ = [
    "ConfigError",
    "CMSCredentials",
    "REQUIRED_ENV_VARS",
    "load_cms_credentials",
    "build_cms_spec",
    "prepare_import",
]

logger = get_logger("importer")

SPEC_VERSION = "2025.1"

REQUIRED_ENV_VARS = (
    "CRYSTALLIZE_TENANT_IDENTIFIER",
    "CRYSTALLIZE_ACCESS_TOKEN_ID",
    "CRYSTALLIZE_ACCESS_TOKEN_SECRET",
)


class ConfigError(Exception):
    """Raised when required configuration is missing; fatal for the CLI."""


@dataclass(frozen=True)
class CMSCredentials:
    tenant_identifier: str
    access_token_id: str
    access_token_secret: str


def load_cms_credentials(env_file: Optional[Union[str, Path]] = None) -> CMSCredentials:
    """Read CMS credentials from the environment (after loading ``.env``).

    Raises:
        ConfigError: If any required variable is missing or empty
    """
    load_dotenv(dotenv_path=env_file)

    missing = [name for name in REQUIRED_ENV_VARS if not os.getenv(name)]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    return CMSCredentials(
        tenant_identifier=os.environ["CRYSTALLIZE_TENANT_IDENTIFIER"],
        access_token_id=os.environ["CRYSTALLIZE_ACCESS_TOKEN_ID"],
        access_token_secret=os.environ["CRYSTALLIZE_ACCESS_TOKEN_SECRET"],
    )


def build_cms_spec(items: List[Dict[str, Any]], tenant_identifier: str) -> Dict[str, Any]:
    return {
        "meta": {
            "version": SPEC_VERSION,
            "created": datetime.now(timezone.utc).isoformat(),
        },
        "tenantIdentifier": tenant_identifier,
        "items": [{**item["catalogueItem"], "type": "product"} for item in items],
    }


def prepare_import(
    import_path: Union[str, Path] = IMPORT_PATH,
    spec_path: Union[str, Path] = CMS_SPEC_PATH,
    credentials: Optional[CMSCredentials] = None,
) -> Path:
    """Write the CMS spec file for a previously generated import file.

    Returns:
        Path of the written spec file

    Raises:
        ConfigError: If the import file is missing or credentials are absent
    """
    import_path = Path(import_path)
    if not import_path.exists():
        raise ConfigError(f"{import_path} not found. Run the scraper first.")

    credentials = credentials or load_cms_credentials()

    with open(import_path, "r", encoding="utf-8") as f:
        items = json.load(f)
    logger.info(f"Ready to import {len(items)} items")

    spec = build_cms_spec(items, credentials.tenant_identifier)
    spec_path = Path(spec_path)
    with open(spec_path, "w", encoding="utf-8") as f:
        json.dump(spec, f, indent=2, ensure_ascii=False)
        f.write("\n")

    logger.info(f"Created spec file: {spec_path}")
    return spec_path
