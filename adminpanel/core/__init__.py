"""Configuration, logging, errors and connection handles."""
