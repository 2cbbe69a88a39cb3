"""Infrastructure Layer: Contains concrete implementations and adapters.

Connects the application to the outside world (the Stripe HTTP API, the
environment, the console) by implementing the interfaces defined in the
domain layer.
"""
