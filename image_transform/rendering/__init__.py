"""Coloring, transforms and image output."""
