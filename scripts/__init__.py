"""
Operator Scripts
Resume, execute, query and system-check entry points
"""
