from django.db import models
from django.db.models import F, Q


class Review(models.Model):
    """One user's verdict on another after a deal; at most one per reviewer and reviewee."""
    RATING_CHOICES = [
        ("positive", "Positive"),
        ("neutral", "Neutral"),
        ("negative", "Negative"),
    ]

    reviewer = models.ForeignKey('users.User', on_delete=models.CASCADE, related_name='reviews_written')
    reviewee = models.ForeignKey('users.User', on_delete=models.CASCADE, related_name='reviews_received')
    rating = models.CharField(max_length=10, choices=RATING_CHOICES)
    review = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'reviews'
        indexes = [
            models.Index(fields=['reviewee', 'created_at'], name='idx_review_reviewee_created'),
        ]
        constraints = [
            models.UniqueConstraint(fields=['reviewer', 'reviewee'], name='unique_review_per_pair'),
            models.CheckConstraint(condition=~Q(reviewer=F('reviewee')), name='review_distinct_users'),
        ]

    def __str__(self):
        return f"{self.reviewer_id} on {self.reviewee_id}: {self.rating}"
