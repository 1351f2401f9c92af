"""User profiles: the authors of species records."""
