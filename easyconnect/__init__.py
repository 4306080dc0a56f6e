"""EasyConnect: group membership service backed by Supabase."""

__version__ = "0.1.0"
