"""
Kanban lamp assembly line simulation.
"""
