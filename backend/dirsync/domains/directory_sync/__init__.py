"""Directory synchronization domain."""
