from .catalog_lookup import CatalogLookup, DjangoCatalogLookup, ProductSnapshot


__all__ = [
    "CatalogLookup",
    "DjangoCatalogLookup",
    "ProductSnapshot",
]
