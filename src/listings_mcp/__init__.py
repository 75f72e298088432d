"""Client for the real-estate listings management API."""
