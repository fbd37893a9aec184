from django.db import models
from django.db.models import F, Q
from django.db.models.functions import Greatest, Least

MESSAGE_DELETED_CONTENT = "[Message deleted]"


class Conversation(models.Model):
    """
    Thread between two users, optionally about one listing.

    The pair is stored in the order the first sender used; uniqueness is
    enforced over the unordered pair plus the listing, with "no listing" as
    its own identity value.
    """
    user1 = models.ForeignKey('users.User', on_delete=models.CASCADE, related_name='+')
    user2 = models.ForeignKey('users.User', on_delete=models.CASCADE, related_name='+')
    listing = models.ForeignKey(
        'listings.Listing', on_delete=models.PROTECT, null=True, blank=True, related_name='conversations'
    )
    last_message_content = models.TextField(null=True, blank=True)
    last_message_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'conversations'
        indexes = [
            models.Index(fields=['user1'], name='idx_conv_user1'),
            models.Index(fields=['user2'], name='idx_conv_user2'),
        ]
        constraints = [
            models.UniqueConstraint(
                Least('user1', 'user2'),
                Greatest('user1', 'user2'),
                'listing',
                condition=Q(listing__isnull=False),
                name='unique_conversation_per_listing',
            ),
            models.UniqueConstraint(
                Least('user1', 'user2'),
                Greatest('user1', 'user2'),
                condition=Q(listing__isnull=True),
                name='unique_conversation_without_listing',
            ),
            models.CheckConstraint(
                condition=~Q(user1=F('user2')),
                name='conversation_distinct_users',
            ),
        ]

    def __str__(self):
        return f"Conversation {self.id} ({self.user1_id} <-> {self.user2_id})"

    def has_participant(self, user_id):
        return user_id in (self.user1_id, self.user2_id)

    def other_participant_id(self, user_id):
        return self.user2_id if self.user1_id == user_id else self.user1_id


class Message(models.Model):
    conversation = models.ForeignKey(Conversation, on_delete=models.CASCADE, related_name='messages')
    sender = models.ForeignKey('users.User', on_delete=models.CASCADE, related_name='sent_messages')
    receiver = models.ForeignKey('users.User', on_delete=models.CASCADE, related_name='received_messages')
    content = models.TextField()
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'messages'
        ordering = ['created_at', 'id']
        indexes = [
            models.Index(fields=['conversation', 'created_at'], name='idx_msg_conv_created'),
            models.Index(fields=['receiver', 'is_read'], name='idx_msg_receiver_unread'),
        ]

    def __str__(self):
        return f"{self.sender_id} to {self.receiver_id}: {self.content[:50]}..."

    @property
    def is_deleted(self):
        return self.content == MESSAGE_DELETED_CONTENT
