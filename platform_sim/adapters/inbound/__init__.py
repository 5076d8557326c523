"""
CLI Inbound Adapter Package
"""
