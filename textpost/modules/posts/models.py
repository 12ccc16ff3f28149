# Supabase table: posts
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: bigint (primary key, generated always as identity)
- username: text (nullable) - author for password-owned identities
- user_id: uuid (nullable, references auth.users.id) - author for provider-owned identities
- email: text (nullable) - display name for provider-owned identities
- content: text (not null, check: length(trim(content)) > 0)
- created_at: timestamp (default: now())

Exactly one of username / user_id is set on each row.
"""
