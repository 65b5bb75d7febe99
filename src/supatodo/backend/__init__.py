"""
Backend Service implementations.

Components:
- supabase_client.py: GoTrue + PostgREST over httpx
- offline.py: in-memory demo backend
- session_file.py: session.json persistence
- refresher.py: polling loop that keeps the session fresh
"""
