"""Real-time chat synchronization service."""
