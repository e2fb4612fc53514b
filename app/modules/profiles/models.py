# Supabase tables: profiles, user_interests, countries, currencies, predefined_categories
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id)
- email: text (unique, not null)
- full_name: text (nullable)
- nickname: text (nullable)
- avatar_url: text (nullable) - object lives in the "avatars" storage bucket
- country: text (nullable, references countries.code)
- currency: text (nullable, references currencies.code)
- subscription_tier: text (default: 'free') - values: free, pro, admin
- subscription_start_date: timestamp (nullable)
- subscription_end_date: timestamp (nullable)
- calendar_preferences: jsonb (nullable) - {"notifications": {"enabled": bool, "beforeEvent": minutes}}
- updated_at: timestamp (nullable)

user_interests:
- user_id: uuid (foreign key to profiles.id)
- category_id: uuid (foreign key to predefined_categories.id)

countries / currencies / predefined_categories:
- lookup tables filtered by is_active: boolean
"""
