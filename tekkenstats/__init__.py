"""Statistics backend for a Tekken ranked ladder."""
