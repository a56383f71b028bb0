"""
catalog/loader.py - Load catalogs from disk
============================================

Reads resources.json and question_bank.json, validates them against the
catalog models and builds the read-only ResourceCatalog and QuestionBank.

Usage:
    from catalog.loader import load_resources, load_question_bank

    resources = load_resources()        # uses config.RESOURCES_PATH
    bank = load_question_bank()         # uses config.QUESTION_BANK_PATH
"""

import json
from pathlib import Path
from typing import Any, Optional, Union

from loguru import logger
from pydantic import TypeAdapter, ValidationError

import config
from catalog.models import CatalogQuestion, CatalogResource
from catalog.question_bank import QuestionBank
from catalog.resources import ResourceCatalog

PathLike = Union[str, Path]

_RESOURCE_LIST = TypeAdapter(list[CatalogResource])
_QUESTION_MAP = TypeAdapter(dict[str, list[CatalogQuestion]])


class CatalogError(ValueError):
    """Raised when a catalog file exists but its content is unusable."""


def _read_json(path: Path, what: str, env_var: str) -> Any:
    if not path.exists():
        raise FileNotFoundError(
            f"{what} not found at {path}. "
            f"Set {env_var} in your .env file or add the file under data/."
        )
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise CatalogError(f"{what} at {path} is not valid JSON: {e}") from e


def load_resources(path: Optional[PathLike] = None) -> ResourceCatalog:
    """
    Load and validate the resource catalog.

    Args:
        path: JSON file holding a list of resource records
              (defaults to config.RESOURCES_PATH)

    Returns:
        ResourceCatalog: Records in file order

    Raises:
        FileNotFoundError: If the file does not exist
        CatalogError: If the file is not a valid resource list
    """
    path = Path(path or config.RESOURCES_PATH)
    raw = _read_json(path, "Resource catalog", "RESOURCES_PATH")

    try:
        records = _RESOURCE_LIST.validate_python(raw)
    except ValidationError as e:
        raise CatalogError(f"Invalid resource catalog {path}: {e}") from e

    catalog = ResourceCatalog(records)
    logger.info("Loaded {} resources from {}", len(catalog), path)
    return catalog


def load_question_bank(path: Optional[PathLike] = None) -> QuestionBank:
    """
    Load and validate the interview question bank.

    Args:
        path: JSON file mapping category -> list of questions
              (defaults to config.QUESTION_BANK_PATH)

    Returns:
        QuestionBank: Categories and questions in file order

    Raises:
        FileNotFoundError: If the file does not exist
        CatalogError: If the file is malformed or repeats a question id
    """
    path = Path(path or config.QUESTION_BANK_PATH)
    raw = _read_json(path, "Question bank", "QUESTION_BANK_PATH")

    try:
        parsed = _QUESTION_MAP.validate_python(raw)
    except ValidationError as e:
        raise CatalogError(f"Invalid question bank {path}: {e}") from e

    seen: dict[int, str] = {}
    categories = {}
    for category, questions in parsed.items():
        for q in questions:
            if q.id in seen:
                raise CatalogError(
                    f"Question id {q.id} appears in both '{seen[q.id]}' and '{category}' ({path})"
                )
            seen[q.id] = category
        categories[category] = [q.to_question() for q in questions]

    bank = QuestionBank(categories)
    logger.info("Loaded {} questions in {} categories from {}", bank.total_questions, len(bank), path)
    return bank
