"""Value mapping between CLI tokens, wire values and JSON."""
