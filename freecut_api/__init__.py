"""
HTTP сервис оптимизации раскроя FreeCut
"""

__version__ = "1.0.0"
