"""Session lifecycle and target-call orchestration."""
