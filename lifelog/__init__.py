"""Lifelog — journaling and mood tracking over Supabase."""

__version__ = "0.1.0"
