# Supabase table: group_participants (see groups/models.py for the full layout)
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
One row per (group, email). The creator normally has an agreed row; groups
created before that existed get a synthesized one on read (id "creator").

Status transitions go through update_participant_status; contribution_amount
is owned by calculate_group_contributions, which splits the group amount
between participants after every membership or status change.

Realtime channel: group_participants:{group_id}
"""
