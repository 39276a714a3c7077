"""A small interactive shell with pipes, redirections, heredocs, expansions and wildcards."""

__version__ = "0.1.0"