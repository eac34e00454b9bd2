"""Memory Lane — a narrative recall game engine.

Listen to what the character tells you, answer questions about it later, and
keep their affection from fading to nothing.
"""
