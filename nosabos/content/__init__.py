# nosabos/content/__init__.py
"""Skill tree content and CEFR helpers"""
