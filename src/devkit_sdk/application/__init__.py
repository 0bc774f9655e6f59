"""Application layer – caching, conversion and feature-flag value objects."""
