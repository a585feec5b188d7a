"""
Error handling package.

Translates trading domain errors into ``{code, message}`` JSON
responses with the matching HTTP status.
"""
