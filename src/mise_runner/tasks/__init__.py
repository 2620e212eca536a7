"""Task engine: catalog grouping, argument collection, run/watch guard, change watching.

Everything here talks to mise only through the `TaskBackend` and `Prompter`
ports, so the whole engine runs against in-memory fakes in tests.
"""
