# nosabos/models/__init__.py
"""Database models and schemas"""
