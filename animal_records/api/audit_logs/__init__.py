# animal_records/api/audit_logs/__init__.py
