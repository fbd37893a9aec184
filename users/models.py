from django.db import models


class User(models.Model):
    ROLE_CHOICES = [
        ("user", "User"),
        ("admin", "Admin"),
    ]

    name = models.CharField(max_length=255)
    email = models.EmailField(max_length=255, unique=True)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default="user")
    is_verified = models.BooleanField(default=False)
    phone = models.CharField(max_length=20, null=True, blank=True)
    # Denormalized review tallies, recomputed whenever a review about this user changes
    positive_count = models.PositiveIntegerField(default=0)
    neutral_count = models.PositiveIntegerField(default=0)
    negative_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'
        indexes = [
            models.Index(fields=['name'], name='users_name_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.id})"

    def summary(self):
        return {"id": self.id, "name": self.name, "email": self.email}

    def review_stats(self):
        return {
            "positive": self.positive_count,
            "neutral": self.neutral_count,
            "negative": self.negative_count,
            "total": self.positive_count + self.neutral_count + self.negative_count,
        }
