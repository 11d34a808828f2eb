# nosabos/api/__init__.py
"""API endpoints and WebSocket handlers"""
