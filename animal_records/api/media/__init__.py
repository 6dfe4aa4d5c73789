# animal_records/api/media/__init__.py
