"""Named blob backend configurations."""
