"""Adapters – concrete integrations behind the SDK's ports."""
