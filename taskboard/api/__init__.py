"""
API module for the Taskboard API
"""
