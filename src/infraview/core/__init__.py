"""Core data types, graph store, session and error handling."""
