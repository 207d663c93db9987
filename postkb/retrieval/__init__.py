from postkb.retrieval.catalog import Catalog

__all__ = ["Catalog"]
