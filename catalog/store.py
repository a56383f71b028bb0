"""
catalog/store.py - Current catalog snapshot and hot reload
===========================================================

Every request reads one immutable Catalog snapshot. A reload builds a
complete new snapshot off to the side and then swaps a single reference,
so in-flight requests keep the snapshot they started with and readers
never take a lock. A failed reload leaves the previous snapshot in place.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from loguru import logger

from catalog.loader import load_question_bank, load_resources
from catalog.question_bank import QuestionBank
from catalog.resources import ResourceCatalog


@dataclass(frozen=True)
class Catalog:
    resources: ResourceCatalog
    questions: QuestionBank
    loaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class CatalogStore:
    """
    Holder of the current Catalog.

    The first access loads the catalogs lazily; reload() swaps in a fresh
    snapshot. Construct with `catalog=` to serve a prebuilt snapshot.
    """

    def __init__(
        self,
        resources_path: Union[str, Path, None] = None,
        question_bank_path: Union[str, Path, None] = None,
        catalog: Optional[Catalog] = None,
    ):
        self.resources_path = resources_path
        self.question_bank_path = question_bank_path
        self._catalog = catalog
        self._reload_lock = threading.Lock()

    @property
    def loaded(self) -> bool:
        return self._catalog is not None

    @property
    def current(self) -> Catalog:
        """
        The active snapshot, loading it on first use.

        Raises:
            FileNotFoundError: If a catalog file is missing
            CatalogError: If a catalog file is malformed
        """
        catalog = self._catalog
        if catalog is None:
            catalog = self.reload()
        return catalog

    def reload(self) -> Catalog:
        """Load both catalogs from disk and swap them in together."""
        with self._reload_lock:
            catalog = Catalog(
                resources=load_resources(self.resources_path),
                questions=load_question_bank(self.question_bank_path),
            )
            previous = self._catalog
            self._catalog = catalog

        if previous is not None:
            logger.info(
                "Catalog reloaded: {} -> {} resources, {} -> {} questions",
                len(previous.resources), len(catalog.resources),
                previous.questions.total_questions, catalog.questions.total_questions,
            )
        return catalog


# =============================================================================
# GLOBAL STORE
# =============================================================================

_store: Optional[CatalogStore] = None


def get_store() -> CatalogStore:
    """Get or create the process-wide catalog store."""
    global _store
    if _store is None:
        _store = CatalogStore()
    return _store
