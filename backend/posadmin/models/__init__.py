from .category import CategoryRecord, CategoryNode

__all__ = [
    'CategoryRecord', 'CategoryNode',
]
