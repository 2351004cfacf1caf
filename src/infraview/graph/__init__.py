"""Layout collaborators."""
