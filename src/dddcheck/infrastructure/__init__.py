"""Infrastructure layer: project file loading and NetworkX graph views.

Infrastructure may import from domain, never from services or commands.
"""
