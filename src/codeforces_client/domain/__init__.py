"""Domain layer: models and exceptions."""
