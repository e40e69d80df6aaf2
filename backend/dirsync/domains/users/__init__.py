"""Local identity store."""
