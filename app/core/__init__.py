"""
Core functionality for the Channel API: dependencies, errors, middleware and
the view pipeline
"""
