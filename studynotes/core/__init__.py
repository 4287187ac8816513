"""Core infrastructure: configuration, logging, exceptions, wiring."""
