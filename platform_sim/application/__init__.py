"""
Application Layer

Ports (contracts) and the stateful services implementing them.
"""
