"""HTTP boundary: app state, dependencies, and routes."""
