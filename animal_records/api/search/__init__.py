# animal_records/api/search/__init__.py
