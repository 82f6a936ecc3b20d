"""Core fractal mathematics."""
