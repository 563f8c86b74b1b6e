"""Domain model exports."""
