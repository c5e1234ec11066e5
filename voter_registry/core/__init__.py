"""Core package - config, logging, exceptions, database."""
