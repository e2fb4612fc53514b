# Supabase tables: gift_groups, group_participants
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
#
# gift_groups is mid-migration: legacy and new column names coexist and both
# must be written on every insert/update. Only codec.py knows the two names.

"""
Expected Supabase table structure:

gift_groups:
- id: uuid (primary key)
- user_id: uuid (foreign key to profiles.id, not null) - owner/creator
- name / title: text - new / legacy
- description / occasion: text - new / legacy
- amount / price: numeric - new / legacy
- image_url / product_image_url: text (nullable) - new / legacy
- currency: text
- product_url: text (nullable)
- date: timestamp (nullable) - occasion date
- comments: text (nullable)
- color: text - pastel hex colour picked at creation
- participants: text[] (legacy) - participant emails, creator included
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

group_participants:
- id: uuid (primary key)
- group_id: uuid (foreign key to gift_groups.id, not null)
- user_id: uuid (nullable) - set when the email belongs to a registered user
- email: text (not null)
- contribution_amount: numeric (default: 0) - rewritten by calculate_group_contributions
- participation_status: text (default: 'pending') - values: pending, agreed, declined
- agreed_at: timestamp (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
- unique constraint on (group_id, email)

Remote procedures:
- update_participant_status(p_group_id, p_email, p_status, p_agreed_at)
- calculate_group_contributions(p_group_id)
"""
