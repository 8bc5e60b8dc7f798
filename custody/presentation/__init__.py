"""
Presentation layer: JSON API blueprints
"""
