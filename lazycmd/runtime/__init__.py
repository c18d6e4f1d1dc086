"""Terminal runtime: config persistence, logging setup, key input, and the interactive loop."""
