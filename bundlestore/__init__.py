"""
bundlestore: boutique de forfaits data mobiles (API FastAPI + Supabase + Paystack).
"""
