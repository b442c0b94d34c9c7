"""
API Contract Parser for API Spec Search

This module loads API description files (OpenAPI 3.x and Swagger 2.0, in YAML or
JSON) from a directory so that their operations can be catalogued and indexed.

Key Features:
- YAML (.yaml/.yml) and JSON (.json) support
- Format detection by file suffix
- Filtering of files that are not API descriptions
- Deterministic file ordering

Example Usage:
    from api_spec_search.catalog.parser import APIParser

    parser = APIParser()
    for spec in parser.parse_directory("assets/apis"):
        print(spec.name, len(spec.document.get("paths", {})))
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from ..exceptions import SpecLoadError

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".yaml", ".yml", ".json")


@dataclass
class SpecFile:
    """One parsed API description document."""

    name: str
    document: Dict[str, Any]


class APIParser:
    """Parser for API contracts."""

    def parse_file(self, file_path: Union[str, Path]) -> Optional[SpecFile]:
        """Parse API contract file.

        Args:
            file_path: Path to API contract file

        Returns:
            Parsed spec file, or None if the file is not an API description

        Raises:
            SpecLoadError: If the file cannot be read or parsed
        """
        file_path = Path(file_path)
        suffix = file_path.suffix.lower()
        if suffix not in SUPPORTED_SUFFIXES:
            raise SpecLoadError(
                f"Unsupported file type: {file_path.suffix}",
                details={"file": str(file_path)},
            )

        logger.debug(f"Parsing contract: {file_path}")

        try:
            with open(file_path, encoding="utf-8") as f:
                if suffix == ".json":
                    document = json.load(f)
                else:
                    document = yaml.safe_load(f)
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            raise SpecLoadError(
                f"Failed to parse contract {file_path.name}: {e}",
                details={"file": str(file_path)},
            ) from e

        if not isinstance(document, dict) or not (
            "openapi" in document or "swagger" in document
        ):
            logger.warning(f"Skipping {file_path.name}: not an OpenAPI/Swagger document")
            return None

        return SpecFile(name=file_path.name, document=document)

    def parse_directory(self, spec_dir: Union[str, Path]) -> List[SpecFile]:
        """Parse every API contract in a directory.

        Args:
            spec_dir: Directory containing contract files

        Returns:
            Parsed spec files ordered by file name. A missing directory yields
            an empty list.
        """
        spec_dir = Path(spec_dir)
        if not spec_dir.is_dir():
            logger.warning(f"API directory not found: {spec_dir}")
            return []

        files = sorted(
            (
                entry
                for entry in spec_dir.iterdir()
                if entry.is_file() and entry.suffix.lower() in SUPPORTED_SUFFIXES
            ),
            key=lambda entry: entry.name,
        )

        specs = []
        for file_path in files:
            spec = self.parse_file(file_path)
            if spec is not None:
                specs.append(spec)

        logger.info(f"Loaded {len(specs)} API description(s) from {spec_dir}")
        return specs


def load_spec_files(spec_dir: Union[str, Path]) -> List[SpecFile]:
    """Load all API description files from a directory."""
    return APIParser().parse_directory(spec_dir)


__all__ = ["APIParser", "SpecFile", "load_spec_files"]
