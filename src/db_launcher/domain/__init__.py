"""Domain layer - launch records, value objects and cleanup/naming services."""
