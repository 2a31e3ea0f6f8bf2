"""Concrete RemoteStore implementations and their transport helpers."""
