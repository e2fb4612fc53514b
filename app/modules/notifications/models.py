# Supabase table: mailbox_notifications
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK and RPCs in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- user_id: uuid (foreign key to profiles.id, not null) - recipient
- title: text (not null)
- message: text (not null)
- type: text (not null) - values: info, success, warning, error
- status: text (not null, default: 'active') - values: active, read, archived
- priority: text (not null) - values: low, normal, medium, high
- category: text (nullable) - e.g. gift, system
- requires_action: boolean (default: false)
- action_url: text (nullable)
- action_text: text (nullable)
- metadata: jsonb (nullable) - group invitations carry {"group_id": ...}
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
- read_at: timestamp (nullable)
- archived_at: timestamp (nullable)

Remote procedures:
- create_notification(p_user_id, p_title, p_message, p_category, p_type, p_status,
  p_priority, p_requires_action, p_action_text, p_action_url, p_metadata)
- mark_notification_read(p_notification_id)      - active -> read
- archive_notification(p_notification_id)        - read/active -> archived
- get_unread_notification_count(p_user_id) -> integer
- send_broadcast_notification(p_admin_id, ...)   - admin only, fans out to every user
- send_user_notification(admin_user_id, recipient_email, ...)
- debug_last_notification(p_recipient_email), debug_notification_access(p_user_id)
"""
