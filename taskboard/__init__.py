"""
Taskboard API
Personal task management backend with per-user categories
"""
__version__ = "1.0.0"
