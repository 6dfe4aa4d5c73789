# animal_records/audit/__init__.py
from .diff import compute_changes, summarize_changes, values_equal
from .trail import AuditTrail

__all__ = ['compute_changes', 'summarize_changes', 'values_equal', 'AuditTrail']
