# Supabase table: gift_categories
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- user_id: uuid (foreign key to profiles.id, not null) - owner
- name: text (not null) - shown as the category title
- description: text (nullable) - "Occasion date: YYYY-MM-DD"
- color: text (nullable) - pastel hex colour picked at creation
- created_at: timestamp (not null) - holds the occasion date
- updated_at: timestamp (nullable)
"""
