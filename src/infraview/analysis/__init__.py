"""Traversal, path, filter, highlight, selection and blast radius engines."""
