"""HTTP API for generating and editing star systems."""
