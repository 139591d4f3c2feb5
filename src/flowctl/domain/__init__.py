"""Domain layer: type registry, typed values, objects and members.

This layer depends only on stdlib.
It must never import from marshal, client, services, commands, or config.
"""
