# nosabos/exercises/__init__.py
"""Exercise prompts, generation and grading"""
