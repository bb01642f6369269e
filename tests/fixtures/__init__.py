"""Code under test used by the factkit test-suite."""
