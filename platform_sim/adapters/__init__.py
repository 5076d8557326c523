"""
Adapters

Inbound: command-line interface.
Outbound: schedulers, YAML loaders, console reporter.
"""
