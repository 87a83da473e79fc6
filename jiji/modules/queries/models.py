# Supabase table: queries
# One row per /ask-jiji request, written with the service_role client

"""
Expected Supabase table structure:
- id: uuid (primary key)
- user_id: uuid (nullable, foreign key to profiles.id, on delete cascade)
- query_text: text (not null)
- answer_text: text (nullable)
- resources_returned: uuid[] (default: '{}')
- created_at: timestamp (default: now())

RLS: users can read, insert and delete their own rows.
"""
