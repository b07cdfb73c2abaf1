"""Cross-cutting concerns: exceptions, metrics, HTTP middleware."""
