# archive_backend/models/__init__.py

# This file makes the 'models' directory a Python package
# and is used to manage imports from this package.

from .user import User
from .archive_item import ArchiveItemBase, ContentBlock, CATEGORY_MODELS, SUB_TYPE_MAP

__all__ = [
    "User",
    "ArchiveItemBase",
    "ContentBlock",
    "CATEGORY_MODELS",
    "SUB_TYPE_MAP",
]
