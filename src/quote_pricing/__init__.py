"""
Quote Pricing Package

Quotation pricing and commission calculation for a contractor marketplace.
Resolves contractor price lists into platform commission, customer price,
vendor net payout and VAT with a single deterministic engine.
"""

__version__ = "1.0.0"
