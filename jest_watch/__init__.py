"""Track Jest watch-mode results against the tests declared in a source file."""
