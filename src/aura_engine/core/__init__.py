"""Immutable types shared by every stage of the engine."""
