"""
Escrow Payments backend.

Razorpay order creation and webhook-driven payment confirmation for escrow
transactions.
"""
__version__ = "0.1.0"
