"""Store index, bulk import and proximity queries."""

from .importer import ImportReport, bootstrap_store_index, import_file_if_empty, import_if_empty
from .index import StoreIndex
from .query import ProximityQueryService

__all__ = [
    "StoreIndex",
    "ProximityQueryService",
    "ImportReport",
    "import_if_empty",
    "import_file_if_empty",
    "bootstrap_store_index",
]
