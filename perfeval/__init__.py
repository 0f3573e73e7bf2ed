"""Performance evaluation console."""
