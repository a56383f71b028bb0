"""
catalog/resources.py - Read-only resource catalog
==================================================

Holds the loaded resource records in file order, the flattened engine view
of each, and case-insensitive category and county indexes for browsing.
"""

from typing import Optional, Sequence

from catalog.models import CatalogResource
from matching.models import Resource


class ResourceCatalog:
    """
    Immutable list of catalog resources.

    `records` keeps the full nested records for display; `resources` is
    the flattened view handed to the matching engine, in the same order.
    """

    def __init__(self, records: Sequence[CatalogResource]):
        self.records: tuple[CatalogResource, ...] = tuple(records)
        self.resources: tuple[Resource, ...] = tuple(r.to_resource() for r in self.records)

        category_index: dict[str, list[CatalogResource]] = {}
        county_index: dict[str, list[CatalogResource]] = {}
        for record in self.records:
            for category in record.categories:
                category_index.setdefault(category.lower(), []).append(record)
            for county in record.counties:
                county_index.setdefault(county.lower(), []).append(record)
        self._category_index = {k: tuple(v) for k, v in category_index.items()}
        self._county_index = {k: tuple(v) for k, v in county_index.items()}

    def __len__(self) -> int:
        return len(self.records)

    def by_category(self, category: str) -> list[CatalogResource]:
        """Exact category label, case-insensitive."""
        return list(self._category_index.get(category.lower(), ()))

    def by_county(self, county: str) -> list[CatalogResource]:
        """Exact county name, case-insensitive."""
        return list(self._county_index.get(county.lower(), ()))

    def find(self, name: str) -> Optional[CatalogResource]:
        """Record whose name equals ``name``, else the first partial match either way round."""
        for record in self.records:
            if record.name == name:
                return record
        for record in self.records:
            if record.name in name or name in record.name:
                return record
        return None

    def search(
        self,
        category: Optional[str] = None,
        county: Optional[str] = None,
        term: Optional[str] = None,
    ) -> list[CatalogResource]:
        """
        Browse the catalog with partial, case-insensitive criteria.

        Args:
            category: Substring of any category label
            county: Substring of any covered county
            term: Substring of the name or description

        Returns:
            list[CatalogResource]: Records meeting every given criterion,
            in catalog order. Empty or None criteria are ignored.
        """
        matches = []
        for record in self.records:
            if category and not _any_contains(record.categories, category):
                continue
            if county and not _any_contains(record.counties, county):
                continue
            if term and not _any_contains([record.name, record.description or ""], term):
                continue
            matches.append(record)
        return matches

    def categories(self) -> list[str]:
        """Distinct category labels, sorted."""
        return sorted({c for r in self.records for c in r.categories})

    def counties(self) -> list[str]:
        """Distinct covered counties, sorted."""
        return sorted({c for r in self.records for c in r.counties})


def _any_contains(values: Sequence[str], needle: str) -> bool:
    needle = needle.lower()
    return any(needle in v.lower() for v in values)
