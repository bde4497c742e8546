"""
Utilities module for the Taskboard API
Errors, logging and security helpers shared across layers
"""
