"""Training loops, losses, metrics and pipelines."""
