"""University records service: repositories, enrollment and HTTP routes."""

__version__ = "1.0.0"
