# Supabase Auth
# Users live in Supabase's auth.users table; nothing here is stored by this service.
# The public `profiles` table (id, email, username) mirrors auth.users and is what
# the group modules look up when inviting by email.

"""
Supabase Auth calls used by AuthService:
- auth.sign_up() - Register new users
- auth.sign_in_with_password() - Authenticate users
- auth.get_user() - Resolve the user behind a bearer token
- auth.sign_out() - End the session
"""
