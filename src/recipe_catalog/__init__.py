"""
Recipe catalog: categories, ingredients and recipes with a
draft -> published -> archived workflow, recipe scaling and shopping lists.
"""

__version__ = "0.1.0"
