"""Scheduling services used by the API views and the realtime layer."""
