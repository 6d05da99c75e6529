"""Unit tests for the dispatcher.

Fast, isolated tests for signature capture, the registry, the invoker,
coercion, call logging and configuration.
"""
