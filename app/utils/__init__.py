"""
Utility package exports
"""

from app.utils.helpers import chunk_list, split_emails, require

__all__ = ["chunk_list", "split_emails", "require"]
