# Supabase table: resources
# This file documents the expected database schema
# Rows are created by jiji/scripts/seed_resources.py; the API only reads them

"""
Expected Supabase table structure:
- id: uuid (primary key)
- title: text (not null)
- description: text (nullable)
- type: text (not null, check: 'ppt' | 'video')
- file_url: text (not null) - public URL of the file
- storage_path: text (nullable) - path inside the learning-materials bucket
- tags: text[] (default: '{}', GIN indexed)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now(), maintained by trigger)

RLS: readable by the authenticated role, managed by service_role only.
"""
