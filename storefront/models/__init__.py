# Import all models here so SQLAlchemy registers them with Base.metadata
from storefront.models.document import Document

__all__ = ["Document"]
