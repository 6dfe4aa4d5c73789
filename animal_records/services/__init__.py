# animal_records/services/__init__.py
