"""Output layer: Rich rendering for humans, JSON for machines."""
