"""Electro Core - shared infrastructure (Supabase client, repositories, optimistic updates)."""
