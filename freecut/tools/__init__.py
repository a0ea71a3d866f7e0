"""
Утилиты командной строки
"""
