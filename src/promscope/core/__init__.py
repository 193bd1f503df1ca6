"""Core sampling engine: models, history, flattening and series extraction."""
