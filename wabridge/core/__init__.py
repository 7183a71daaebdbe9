"""Core configuration, logging, errors and event dispatch for wabridge."""
