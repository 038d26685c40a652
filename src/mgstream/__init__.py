"""mgstream — streamed metagenome annotation service."""

__version__ = "0.1.0"
