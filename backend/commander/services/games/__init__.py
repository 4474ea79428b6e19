"""Game domain services: commands, pacing, scoring and the round engine.

Everything here except the registry is free of Flask, so HTTP routes and
socket handlers stay thin wrappers around the same state machine.
"""
