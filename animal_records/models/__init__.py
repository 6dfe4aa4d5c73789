# animal_records/models/__init__.py
