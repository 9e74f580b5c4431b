# Supabase tables: user_tunes, user_headshots
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Ledger written by the Astria dispatcher on every branch, simulated or real.
It overlaps with models/images (see modules/tunes) and is not reconciled
with them.

user_tunes:
- user_id: uuid (references auth.users.id, not null)
- tune_id: text (unique, not null) - Astria tune id or a local tune-<ms> id
- status: text (not null) - values: training, complete, error
- created_at: timestamp (default: now())

user_headshots:
- user_id: uuid (references auth.users.id, not null)
- image_url: text (not null)
- prompt_id: text (nullable) - Astria prompt id or a local prompt-<ms> id
- style_type: text (nullable) - professional, casual, creative
- created_at: timestamp (default: now())
"""
