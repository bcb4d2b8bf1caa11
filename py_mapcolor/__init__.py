"""Map-coloring puzzle generator: organic board subdivision and exact coloring."""

__version__ = "0.1.0"
