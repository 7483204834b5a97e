"""
HTTP interface for the question paper solver.
"""

from paper_solver.api.app import create_app

__all__ = ["create_app"]
