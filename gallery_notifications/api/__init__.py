"""API package exposing the aggregated router and shared dependencies."""
