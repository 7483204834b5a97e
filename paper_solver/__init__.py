"""
Question paper solver.

Extracts the text of an uploaded question paper (plain text, image or
PDF) and asks a language model for step-by-step solutions.
"""

__version__ = "0.1.0"
