"""Vision board backend: projects, pipeline, calendar, expenses, learning."""

__version__ = "0.1.0"
