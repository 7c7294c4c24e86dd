"""Infrastructure layer: adapters for exchanges, storage, crypto and messaging."""
