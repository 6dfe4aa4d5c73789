# animal_records/api/auth/__init__.py
