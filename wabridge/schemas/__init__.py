"""Schemas for inbound webhook payloads."""
