"""Package-manager dialog models: per-project and per-solution package actions."""
