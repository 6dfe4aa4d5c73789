# animal_records/core/__init__.py
