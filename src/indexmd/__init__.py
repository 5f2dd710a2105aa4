"""
indexmd - Recursive, LLM-summarized index documents for directory trees.
"""

__version__ = "0.1.0"
