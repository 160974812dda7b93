"""Core configuration, logging, exceptions and protocols."""
