from .models import CatalogRecord, CatalogUnavailable
from .source import CatalogSource, InMemoryCatalog
from .resolver import ItemResolver, decode_item_id, encode_hq

__all__ = [
    "CatalogRecord",
    "CatalogUnavailable",
    "CatalogSource",
    "InMemoryCatalog",
    "ItemResolver",
    "decode_item_id",
    "encode_hq",
]
