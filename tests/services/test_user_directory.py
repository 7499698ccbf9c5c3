"""
Tests for batched email -> user resolution.
"""

import asyncio

import pytest

from app.errors import PreconditionFailed
from app.services.user_directory import UserDirectoryResolver


class TestResolveUsers:
    """Test suite for UserDirectoryResolver."""

    def test_five_emails_in_batches_of_two(self, fake_client):
        """Test that 5 emails issue exactly 3 lookups sized 2, 2, 1, in order."""
        emails = [f"u{i}@corp.com" for i in range(5)]
        for i, email in enumerate(emails):
            fake_client.add_user(email, f"id-{i}")

        users = asyncio.run(
            UserDirectoryResolver(batch_size=2).resolve_users(fake_client, emails)
        )

        lookups = fake_client.calls_to("find_users_by_mail")
        assert [len(call[1]) for call in lookups] == [2, 2, 1]
        assert [call[1] for call in lookups] == [emails[0:2], emails[2:4], emails[4:5]]
        assert [user.id for user in users] == [f"id-{i}" for i in range(5)]

    def test_unmatched_email_yields_no_record(self, fake_client):
        """Test that unknown emails are skipped rather than failing."""
        fake_client.add_user("known@corp.com", "id-known")

        users = asyncio.run(
            UserDirectoryResolver(batch_size=2).resolve_users(
                fake_client, ["missing@corp.com", "known@corp.com", "ghost@corp.com"]
            )
        )

        assert [user.id for user in users] == ["id-known"]
        assert len(fake_client.calls_to("find_users_by_mail")) == 2

    def test_empty_list_rejected_before_lookup(self, fake_client):
        """Test that an empty email list raises without any remote call."""
        with pytest.raises(PreconditionFailed):
            asyncio.run(UserDirectoryResolver().resolve_users(fake_client, []))
        assert fake_client.calls == []

    def test_default_batch_size_from_settings(self):
        """Test that the default batch size is the directory's two-term limit."""
        assert UserDirectoryResolver().batch_size == 2
