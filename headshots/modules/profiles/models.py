# Supabase table: profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key, references auth.users.id)
- first_name: text (nullable)
- last_name: text (nullable)
- updated_at: timestamp (nullable)

Rows are created lazily: the account settings form upserts on save.
"""
