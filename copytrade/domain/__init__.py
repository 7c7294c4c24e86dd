"""Domain layer: business rules without I/O."""
