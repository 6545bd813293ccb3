"""
HomeQuote: multi-tenant quoting and lead capture API for home-services partners
"""
__version__ = "1.0.0"
