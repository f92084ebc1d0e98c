"""HTTP blueprints for the cave generation service."""
