# animal_records/api/health_updates/__init__.py
