"""
Solution generation for extracted question papers.
"""

from paper_solver.generation.generator import (
    GeminiLanguageModel,
    LanguageModel,
    SolutionGenerator,
    create_solution_generator,
)

__all__ = [
    "GeminiLanguageModel",
    "LanguageModel",
    "SolutionGenerator",
    "create_solution_generator",
]
