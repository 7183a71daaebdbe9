"""Messaging layer for wabridge."""
