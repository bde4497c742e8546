"""
Database module for the Taskboard API
"""
from .database import engine, create_db_and_tables, get_store, memory_store

__all__ = ["engine", "create_db_and_tables", "get_store", "memory_store"]
