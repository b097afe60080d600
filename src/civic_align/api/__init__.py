"""HTTP API for the Civic Align service."""
