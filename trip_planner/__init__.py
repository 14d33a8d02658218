"""Trip planner: AI itinerary generation backed by OpenRouter."""

__version__ = "1.0.0"
