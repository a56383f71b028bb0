"""
Catalog package - resource and question-bank loading.

Usage:
    from catalog import get_store

    catalog = get_store().current
    catalog.resources.resources      # flattened engine Resources
    catalog.questions                # QuestionBank (a category mapping)
"""

from catalog.loader import CatalogError, load_question_bank, load_resources
from catalog.question_bank import QuestionBank
from catalog.resources import ResourceCatalog
from catalog.store import Catalog, CatalogStore, get_store

__all__ = [
    "Catalog",
    "CatalogError",
    "CatalogStore",
    "QuestionBank",
    "ResourceCatalog",
    "get_store",
    "load_question_bank",
    "load_resources",
]
