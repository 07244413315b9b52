"""Transport session and resource client."""
