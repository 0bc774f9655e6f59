"""Resilience – deadline enforcement for remote calls."""
