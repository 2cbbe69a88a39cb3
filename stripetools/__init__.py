"""stripetools: a rate-limited Stripe API client and command line front end."""

__version__ = "0.1.0"
