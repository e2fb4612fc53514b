# Supabase tables: subscription_tiers, subscription_history (+ profiles.subscription_*)
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

subscription_tiers:
- id: text (primary key) - values: free, pro, admin
- name: text (not null)
- description: text
- features: jsonb - {max_gifts, max_groups, max_categories, advanced_analytics?,
  priority_support?, admin_panel?, user_management?}
- created_at: timestamp (default: now())

subscription_history:
- id: uuid (primary key)
- user_id: uuid (foreign key to profiles.id)
- old_tier: text (nullable)
- new_tier: text (not null)
- changed_at: timestamp (default: now())
- changed_by: uuid (nullable) - admin who made the change
- reason: text (nullable)
- metadata: jsonb (nullable)

profiles (subscription columns):
- subscription_tier: text (default: 'free')
- subscription_start_date: timestamp (nullable)
- subscription_end_date: timestamp (nullable)

Remote procedures:
- check_subscription_limits(user_id, limit_type, current_count) -> boolean
"""
