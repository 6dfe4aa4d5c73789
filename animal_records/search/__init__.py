# animal_records/search/__init__.py
from .engine import RESULT_TYPES, RecordSet, SearchResult, search_records
from .loader import RecordLoader

__all__ = ['RESULT_TYPES', 'RecordSet', 'SearchResult', 'search_records', 'RecordLoader']
