"""
Pure marketplace rules: distance, availability, pricing, form gating,
wizards and client route guards
"""
