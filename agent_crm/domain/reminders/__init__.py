"""
Reminders Domain

Agent reminders, per-type reminder settings, and the derived birthday and
policy-expiry views.

Listing follows two retrieval paths (see query.py): filtered listings report
the exact match count, unfiltered listings report a cross-source estimate.
"""
