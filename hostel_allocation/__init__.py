"""Bed and asset allocation service for hostel operations."""

__version__ = "0.1.0"
