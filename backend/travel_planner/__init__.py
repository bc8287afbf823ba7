"""Travel planner search layer: cached SerpApi searches behind a FastAPI app."""

__version__ = "0.1.0"
