"""Domain layer: catalogue, models and analysis services."""
