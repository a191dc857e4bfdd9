"""Core domain package for nudger.

Core contains the cursor, due-check and dispatch logic without any SMTP or
storage-specific code, keeping the scheduling rules portable and testable.
"""
