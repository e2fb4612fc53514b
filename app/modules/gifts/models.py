# Supabase table: gifts
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- user_id: uuid (foreign key to profiles.id, not null) - owner
- category_id: uuid (foreign key to gift_categories.id, not null)
- recipient: text (not null)
- recipient_email: text (nullable)
- name: text (not null)
- description: text (nullable)
- price: numeric (nullable)
- url: text (nullable) - product page
- image_url: text (nullable) - derived from url at write time
- is_purchased: boolean (default: false)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
