# animal_records/api/__init__.py
