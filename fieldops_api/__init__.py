"""Field operations pipeline API."""
