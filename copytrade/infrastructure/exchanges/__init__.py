"""Exchange adapters, factory and retry policy."""
