"""
Domain Layer

Models, static template tables and pure services. Nothing here holds
mutable session state or touches timers.
"""
