# nosabos/content/levels/__init__.py
"""Skill tree units per CEFR level"""
