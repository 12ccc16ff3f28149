# Supabase tables: users, auth.users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

users (password-owned identities):
- id: bigint (primary key, generated always as identity)
- username: text (unique, not null)
- password_hash: text (not null) - bcrypt hash, never the plaintext password
- created_at: timestamp (default: now())

auth.users (provider-owned identities):
Managed entirely by Supabase Auth (email/password sign-up, OAuth providers,
sessions and JWTs). This service only reads the user id and email from a
verified access token.
"""
