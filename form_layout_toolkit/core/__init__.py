"""GUI-agnostic core: layout model, mutation engine, importers and services."""
