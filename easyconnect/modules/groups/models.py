# Supabase tables: groups, group_members, activities
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

groups:
- id: uuid (primary key)
- name: text (not null)
- description: text (nullable)
- visibility: text (not null, default: 'private') - values: public, private
- join_method: text (not null, default: 'invitation') - values: direct, invitation
- group_type_id: int8 (foreign key to group_types.id, not null)
- created_by: uuid (foreign key to profiles.id)
- created_at: timestamptz (default: now())

group_members:
- group_id: uuid (foreign key to groups.id, not null)
- user_id: uuid (foreign key to profiles.id, not null)
- role: text (not null, default: 'member') - values: admin, member
- status: text (not null, default: 'invited') - values: invited, joined, declined, requested
- created_at: timestamptz (default: now())

activities:
- id: uuid (primary key)
- group_id: uuid (foreign key to groups.id, not null)
- created_at: timestamptz (default: now())

Deleting a group is done client-side in three steps (group_members,
activities, groups) without a transaction.
"""
