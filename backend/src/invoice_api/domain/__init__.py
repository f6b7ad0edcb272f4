"""
Domain package - Core listing logic with no external dependencies.

Contains the invoice model, listing query options, parameter validation
and pagination rules.
"""
