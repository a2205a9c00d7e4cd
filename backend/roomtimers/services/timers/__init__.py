"""Timer domain services for the authority.

The ticker advances running timers and broadcasts their counts; socket
handlers and HTTP routes only read and mutate the room registry.
"""
