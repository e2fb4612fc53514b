# Supabase Auth
# Registration, login, JWT validation and password storage are delegated to
# Supabase Auth (auth.users). Signup additionally writes the application's own
# rows: one profiles row and the optional user_interests rows.

"""
Signup sequence (no transaction; later steps may fail independently):
1. auth.sign_up()                  - creates auth.users row
2. insert profiles                 - id = auth user id, email, nickname, country, currency
3. insert user_interests (best effort) - one row per selected predefined category
"""
