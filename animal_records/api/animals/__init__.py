# animal_records/api/animals/__init__.py
