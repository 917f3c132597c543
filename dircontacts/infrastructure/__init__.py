"""Infrastructure Layer: Contains concrete implementations and adapters.

Connects the application to the outside world (directory APIs, console,
configuration files) by implementing the interfaces defined in the domain
layer. Also includes resilience helpers and process-wide state.
"""
