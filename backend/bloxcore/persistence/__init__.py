"""Local, remote and hybrid preset persistence."""
