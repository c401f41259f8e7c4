"""Infrastructure layer: concrete adapters for the ports."""
