"""Fakes for the local identity store."""
