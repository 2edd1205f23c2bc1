"""Utility modules for the work item cloner."""
