# Supabase tables: models, samples, images, credits
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

models:
- id: uuid (primary key)
- user_id: uuid (references auth.users.id, not null)
- modelid: text (Astria tune id, or a local tune-<ms> id)
- name: text
- status: text - values: pending, training, processing, completed, failed
- type: text (default: 'headshot')
- created_at: timestamp (default: now())

samples:
- id: uuid (primary key)
- modelid: uuid (models.id)
- uri: text - Astria image id of a training selfie

images:
- id: uuid (primary key)
- modelid: uuid (models.id)
- uri: text - generated headshot URL
- created_at: timestamp (default: now())

credits:
- id: uuid (primary key)
- user_id: uuid
- amount: integer
Not read or written by this service.
"""
