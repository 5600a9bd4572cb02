"""Shared test fixtures for pico-bootstrap."""
