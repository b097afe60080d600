"""Core configuration, logging, and domain errors."""
