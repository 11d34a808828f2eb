# nosabos/managers/__init__.py
"""Manager classes for different system components"""
