"""Booking and mission progression core for the fitness study platform."""

__version__ = "0.1.0"
