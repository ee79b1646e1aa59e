"""Version 1 of the Request Portal API."""
