"""Fakes for the directory sync domain."""
