# Supabase table: group_categories
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

group_categories:
- id: uuid (primary key)
- name: text (not null)
- color: text - pastel hex colour picked at creation
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())
"""
