"""supatodo: a terminal todo list over a Supabase-style backend."""

__version__ = "0.1.0"
